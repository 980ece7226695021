"""Tests for chart rendering and PDF output."""
import base64

import pytest

from cli import compute_display_data, generate_summary_text
import report
from tco import InvestmentInputs, compute_tco, holding_period_sweep

PNG_MAGIC = b"\x89PNG"


def _run(**overrides):
    inputs = InvestmentInputs(**overrides)
    result = compute_tco(inputs)
    sweep = holding_period_sweep(inputs)
    d = compute_display_data(inputs, result, sweep)
    return inputs, result, sweep, d


def test_web_charts_are_png():
    inputs, result, sweep, _ = _run()
    images = report.get_web_charts(inputs, result, sweep)
    assert len(images) == 2
    for img in images:
        assert base64.b64decode(img).startswith(PNG_MAGIC)


def test_web_charts_without_sweep():
    inputs, result, _, _ = _run()
    assert len(report.get_web_charts(inputs, result, None)) == 1


def test_generate_pdf(tmp_path):
    inputs, result, sweep, d = _run(is_monthly=False, holding_period=12)
    path = tmp_path / "tco.pdf"
    returned = report.generate_pdf(inputs, result, sweep, d, generate_summary_text(d), str(path))
    assert returned == str(path)
    assert path.read_bytes().startswith(b"%PDF")


def test_usd_axis_formatter():
    assert report._usd_fmt(2_500_000, None) == "$2.5M"
    assert report._usd_fmt(12_000, None) == "$12k"
    assert report._usd_fmt(500, None) == "$500"


class _FailingPdf:
    def __init__(self, path):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def savefig(self, fig, **kwargs):
        raise OSError("disk full")


def test_generate_pdf_closes_figures_on_failure(monkeypatch, tmp_path):
    inputs, result, sweep, d = _run()
    report.plt.close("all")
    monkeypatch.setattr(report, "PdfPages", _FailingPdf)
    with pytest.raises(OSError):
        report.generate_pdf(inputs, result, sweep, d, generate_summary_text(d),
                            str(tmp_path / "tco.pdf"))
    assert report.plt.get_fignums() == []


def test_generate_pdf_page_count(monkeypatch, tmp_path):
    inputs, result, sweep, d = _run()
    saved = []

    class _CountingPdf(_FailingPdf):
        def savefig(self, fig, **kwargs):
            saved.append(fig)

    monkeypatch.setattr(report, "PdfPages", _CountingPdf)
    report.generate_pdf(inputs, result, sweep, d, "", str(tmp_path / "a.pdf"))
    report.generate_pdf(inputs, result, None, d, "", str(tmp_path / "b.pdf"))
    assert len(saved) == 3 + 2
