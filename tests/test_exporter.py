"""
Tests for the static HTML export.
"""

from jmeter_dashboard.exporter import export_static_report, render_table_html, rendered_table_frame
from jmeter_dashboard.filters import FilterState


def test_frame_with_grouped_header(assembly):
    frame = rendered_table_frame(assembly.render("statisticsTable"))
    assert frame.columns.nlevels == 2
    assert frame.columns[3] == ("Executions", "Error %")
    assert "Total" not in list(frame.iloc[:, 0])
    assert len(frame) == 5


def test_frame_without_pinned_row(assembly):
    frame = rendered_table_frame(assembly.render("errorsTable"))
    assert list(frame.columns) == ["Type of error", "Number of errors", "% in errors", "% in all samples"]
    assert list(frame.iloc[:, 2]) == ["98.82%", "1.07%", "0.11%"]


def test_export_static_report(tmp_path, assembly):
    output = export_static_report(assembly, tmp_path / "out" / "report.html",
                                  FilterState(series_filter="Login"), title="Nightly run")
    page = output.read_text(encoding="utf-8")

    assert output.exists()
    assert "<title>Nightly run</title>" in page
    assert 'id="statisticsTable"' in page
    assert page.count('<tbody class="pinned">') == 3
    assert "Login Request" in page
    assert "Get Info</td>" not in page.split('id="statisticsTable"')[1].split("</table>")[0]
    assert "Series filter: Login" in page


def test_pinned_row_has_its_own_body(assembly):
    rendered = assembly.render("statisticsTable", FilterState(series_filter="no-such-sampler"))
    table_html = render_table_html(rendered, "Statistics")

    pinned, items = table_html.split('<tbody class="pinned">')[1].split("</tbody>", 1)
    assert "<td>Total</td>" in pinned
    assert pinned.count("<tr>") == 1
    assert "<td>" not in items.split("</tbody>")[0]


def test_table_without_pinned_row_has_single_body(assembly):
    table_html = render_table_html(assembly.render("errorsTable"), "Errors")
    assert 'class="pinned"' not in table_html
    assert table_html.count("<tbody>") == 1
