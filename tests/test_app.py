"""
Tests for the Flask views, exports and JSON API.
"""

from __future__ import annotations

import io

from analyzer import FALLBACK_ADVICE, PROMPT_MESSAGE


def _only_cache_key():
    import app as app_module

    assert len(app_module._cache) == 1
    return next(iter(app_module._cache))


# --- Pages ---


def test_index_renders_placeholders(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Upload or paste your legal document" in resp.data
    assert b"Run an analysis to view the summary." in resp.data


def test_analyze_pasted_text(client, liability_doc):
    resp = client.post("/analyze", data={"text": liability_doc})
    assert resp.status_code == 200
    assert b"Liability is limited to fees paid." in resp.data
    assert b"Low &bull; 12" in resp.data
    assert b"meter-low" in resp.data
    assert b"Cap liability to fees paid" in resp.data


def test_analyze_empty_text_uses_sample(client):
    resp = client.post("/analyze", data={"text": "   "})
    assert resp.status_code == 200
    assert b"Medium &bull; 57" in resp.data
    assert b"Auto-renewal present." in resp.data


def test_analyze_high_risk_document(client):
    doc = "Indemnification and liability and penalty and breach and damages."
    resp = client.post("/analyze", data={"text": doc})
    assert resp.status_code == 200
    assert b"High &bull; 60" in resp.data
    assert b"badge-high" in resp.data
    assert b"meter-high" in resp.data
    assert b"<li>High overall risk. Seek legal review before signing.</li>" in resp.data


def test_badge_rounds_half_scores_up(client):
    doc = "Liability is limited. " + "x" * 828
    resp = client.post("/analyze", data={"text": doc})
    assert b"Low &bull; 13" in resp.data
    assert b"Risk pointer at 13%" in resp.data


def test_question_box_is_submitted_with_analyze(client):
    page = client.get("/").data
    assert page.count(b"<form") == 1
    assert page.count(b'name="question"') == 1
    assert b'formaction="/ask"' in page


def test_analyze_with_question_shows_answer(client):
    doc = "Payment is due monthly. Termination requires 30 days notice."
    resp = client.post("/analyze", data={"text": doc, "question": "termination notice"})
    assert b'<div class="answer">Termination requires 30 days notice.</div>' in resp.data


def test_upload_plain_text(client):
    data = {"file": (io.BytesIO(b"The supplier must indemnify the buyer."), "contract.txt", "text/plain")}
    resp = client.post("/analyze", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert b"Indemnification may shift liability to you." in resp.data


def test_upload_invalid_utf8_is_replaced_not_dropped(client):
    data = {"file": (io.BytesIO(b"Late\xfffee applies."), "terms.txt", "text/plain")}
    resp = client.post("/analyze", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert "Late\ufffdfee applies.".encode() in resp.data
    assert b"Latefee" not in resp.data


def test_upload_markdown_by_extension(client):
    data = {"file": (io.BytesIO(b"# Terms\n\nA late fee applies."), "terms.md", "application/octet-stream")}
    resp = client.post("/analyze", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert b'<span class="badge">late fee</span>' in resp.data


def test_upload_unsupported_type_degrades_to_notice(client):
    data = {"file": (io.BytesIO(b"%PDF-1.7 binary"), "contract.pdf", "application/pdf")}
    resp = client.post("/analyze", data=data, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert b"Unsupported file type for inline parsing. Please paste text." in resp.data
    assert b"File: contract.pdf" in resp.data
    assert FALLBACK_ADVICE.encode() in resp.data


def test_upload_too_large_redirects(client, flask_app, monkeypatch):
    monkeypatch.setitem(flask_app.config, "MAX_CONTENT_LENGTH", 100)
    data = {"file": (io.BytesIO(b"x" * 1000), "big.txt", "text/plain")}
    resp = client.post("/analyze", data=data, content_type="multipart/form-data")
    assert resp.status_code == 302


def test_ask_without_input_prompts(client):
    resp = client.post("/ask", data={"text": "", "question": ""})
    assert resp.status_code == 200
    assert PROMPT_MESSAGE.encode() in resp.data


def test_ask_keeps_cached_analysis(client, liability_doc):
    client.post("/analyze", data={"text": liability_doc})
    key = _only_cache_key()
    resp = client.post("/ask", data={"text": liability_doc, "question": "liability", "key": key})
    assert b'<div class="answer">Liability is limited to fees paid.</div>' in resp.data
    assert b"Low &bull; 12" in resp.data

    import app as app_module
    assert app_module._cache[key]["question"] == "liability"


# --- Exports ---


def test_export_without_analysis_redirects(client):
    resp = client.get("/export/pdf")
    assert resp.status_code == 302


def test_export_csv(client, liability_doc):
    client.post("/analyze", data={"text": liability_doc})
    resp = client.get(f"/export/csv?key={_only_cache_key()}")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    body = resp.data.decode("utf-8-sig")
    assert "Risk Level,Low" in body


def test_export_pdf_uses_session_key(client, liability_doc):
    client.post("/analyze", data={"text": liability_doc})
    resp = client.get("/export/pdf")
    assert resp.status_code == 200
    assert resp.data[:4] == b"%PDF"


def test_export_word(client, liability_doc):
    client.post("/analyze", data={"text": liability_doc})
    resp = client.get("/export/word")
    assert resp.status_code == 200
    assert resp.data[:2] == b"PK"


# --- REST API ---


def test_api_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_api_analyze(client, liability_doc):
    resp = client.post("/api/analyze", json={"text": liability_doc})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["risk_score"] == 12
    assert body["risk_level"] == "Low"
    assert body["highlights"] == ["liability"]
    assert "answer" not in body


def test_api_analyze_with_question(client, liability_doc):
    resp = client.post("/api/analyze", json={"text": liability_doc, "question": "What about liability?"})
    assert resp.get_json()["answer"] == "Liability is limited to fees paid."


def test_api_analyze_empty_text_is_valid(client):
    resp = client.post("/api/analyze", json={"text": ""})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["risk_score"] == 0
    assert body["advice"] == [FALLBACK_ADVICE]


def test_api_analyze_rejects_bad_bodies(client):
    assert client.post("/api/analyze", data="not json", content_type="text/plain").status_code == 400
    assert client.post("/api/analyze", json=["a", "list"]).status_code == 400
    resp = client.post("/api/analyze", json={"text": 42})
    assert resp.status_code == 400
    assert "text" in resp.get_json()["error"]


def test_api_ask(client):
    resp = client.post("/api/ask", json={"text": "", "question": "anything"})
    assert resp.get_json() == {"answer": PROMPT_MESSAGE}
