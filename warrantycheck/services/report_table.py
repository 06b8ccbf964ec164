"""Render a stored report CSV as an HTML table."""

import csv
import html
import io


def csv_to_html_table(csv_text: str) -> str:
    text = (csv_text or "").strip()
    if not text:
        return "<p>No data.</p>"

    lines = [row for row in csv.reader(io.StringIO(text)) if row]
    header, body = lines[0], lines[1:]

    thead = "".join(f"<th>{html.escape(col)}</th>" for col in header)
    tbody = "".join(
        "<tr>" + "".join(f"<td>{html.escape(col)}</td>" for col in row) + "</tr>"
        for row in body
    )
    return (
        '<table class="table table-striped">'
        f"<thead><tr>{thead}</tr></thead>"
        f"<tbody>{tbody}</tbody>"
        "</table>"
    )


def results_page(csv_text: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html><head><title>Warranty Check Results</title></head>"
        "<body><h1>Warranty Check Results</h1>"
        f"{csv_to_html_table(csv_text)}"
        '<p><a href="/api/warranty/download">Download CSV</a></p>'
        "</body></html>"
    )
