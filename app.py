from flask import (
    Flask, render_template, request, redirect, url_for,
    flash, jsonify, send_file, session
)
from werkzeug.exceptions import RequestEntityTooLarge
from analyzer import (
    analyze, answer_query, risk_band, meter_position, display_score,
    AnalysisResult, SAMPLE_DOCUMENT,
)
import config
import io, os, time, uuid

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
VERSION = "1.0"

app = Flask(
    __name__,
    template_folder=os.path.join(BASE_DIR, "templates"),
    static_folder=os.path.join(BASE_DIR, "static"),
)
app.secret_key = config.SECRET_KEY
app.config["ANALYSIS_DELAY"] = config.ANALYSIS_DELAY
app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_MB * 1024 * 1024

# ── In-memory result cache (export links only, never written to disk) ──────
_cache: dict = {}

def _cache_put(result: AnalysisResult, question: str = "", answer: str = "") -> str:
    key = str(uuid.uuid4())
    if len(_cache) >= config.MAX_CACHE:
        del _cache[next(iter(_cache))]
    _cache[key] = {"result": result.to_dict(), "question": question, "answer": answer}
    return key

def _cache_get(key: str):
    entry = _cache.get(key)
    if not entry:
        return None, "", ""
    return AnalysisResult.from_dict(entry["result"]), entry["question"], entry["answer"]

def _cache_update_answer(key: str, question: str, answer: str) -> None:
    entry = _cache.get(key)
    if entry:
        entry["question"], entry["answer"] = question, answer

# ── File intake ──────────────────────────────────────────────────────────────
INLINE_EXTENSIONS = {".md"}

UNSUPPORTED_NOTICE = "Unsupported file type for inline parsing. Please paste text.\nFile: {name}"

def _ext(fn: str) -> str:
    return os.path.splitext(fn.lower())[1]

def _is_inline(filename: str, mimetype: str) -> bool:
    return (mimetype or "").startswith("text/") or _ext(filename) in INLINE_EXTENSIONS

def _read_upload(upload) -> str:
    """Plain text and markdown are read as-is; anything else becomes a notice."""
    if _is_inline(upload.filename, upload.mimetype):
        return upload.read().decode("utf-8", errors="replace")
    app.logger.info("Skipping unsupported upload %s (%s)", upload.filename, upload.mimetype)
    flash(f"'{upload.filename}' can't be read inline. Paste its text instead.", "warning")
    return UNSUPPORTED_NOTICE.format(name=upload.filename)

def _simulate_latency() -> None:
    delay = app.config.get("ANALYSIS_DELAY", 0)
    if delay > 0:
        time.sleep(delay)

def _render(result=None, doc_text="", question="", answer="", cache_key=""):
    band = risk_band(result.risk_score) if result else None
    return render_template(
        "index.html",
        r=result,
        band=band,
        score=display_score(result.risk_score) if result else 0,
        pointer=meter_position(result.risk_score) if result else 0,
        doc_text=doc_text,
        question=question,
        answer=answer,
        cache_key=cache_key,
    )

# ── Web routes ───────────────────────────────────────────────────────────────

@app.route("/", methods=["GET"])
def index():
    return _render()


@app.route("/analyze", methods=["POST"])
def analyze_doc():
    text = request.form.get("text", "")
    question = request.form.get("question", "")

    upload = request.files.get("file")
    if upload and upload.filename:
        text = _read_upload(upload)

    base = text.strip() or SAMPLE_DOCUMENT
    if not text.strip():
        app.logger.info("No document supplied, analyzing the sample agreement")

    _simulate_latency()
    result = analyze(base)
    answer = answer_query(base, question) if question.strip() else ""

    cache_key = _cache_put(result, question, answer)
    session["result_key"] = cache_key
    return _render(result, doc_text=text, question=question,
                   answer=answer, cache_key=cache_key)


@app.route("/ask", methods=["POST"])
def ask():
    text = request.form.get("text", "")
    question = request.form.get("question", "")
    key = request.form.get("key", "")

    if not text.strip() or not question.strip():
        flash("Enter a document and a question first.", "warning")

    answer = answer_query(text, question)
    result, _, _ = _cache_get(key) if key else (None, "", "")
    if result:
        _cache_update_answer(key, question, answer)
    return _render(result, doc_text=text, question=question,
                   answer=answer, cache_key=key if result else "")


@app.errorhandler(RequestEntityTooLarge)
def too_large(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": f"Upload exceeds {config.MAX_UPLOAD_MB} MB."}), 413
    flash(f"File too large (limit {config.MAX_UPLOAD_MB} MB).", "danger")
    return redirect(url_for("index"))


# ── Export routes ────────────────────────────────────────────────────────────

def _get_cached() -> tuple:
    key = request.args.get("key") or session.get("result_key")
    return _cache_get(key) if key else (None, "", "")


@app.route("/export/pdf")
def export_pdf():
    result, question, answer = _get_cached()
    if not result:
        flash("No analysis found. Please analyze a document first.", "warning")
        return redirect(url_for("index"))
    from exporters import export_pdf as gen
    return send_file(io.BytesIO(gen(result, question, answer)),
        mimetype="application/pdf", as_attachment=True,
        download_name="legal_analysis_report.pdf")

@app.route("/export/word")
def export_word():
    result, question, answer = _get_cached()
    if not result:
        flash("No analysis found.", "warning"); return redirect(url_for("index"))
    from exporters import export_word as gen
    return send_file(io.BytesIO(gen(result, question, answer)),
        mimetype="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        as_attachment=True, download_name="legal_analysis_report.docx")

@app.route("/export/csv")
def export_csv():
    result, question, answer = _get_cached()
    if not result:
        flash("No analysis found.", "warning"); return redirect(url_for("index"))
    from exporters import export_csv as gen
    return send_file(io.BytesIO(gen(result, question, answer)),
        mimetype="text/csv", as_attachment=True,
        download_name="legal_analysis.csv")


# ── REST API ─────────────────────────────────────────────────────────────────

def _json_fields(*names):
    """
    Pull string fields out of a JSON body.
    Returns (values, error_response); missing fields default to "".
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None, (jsonify({"error": "Request body must be a JSON object."}), 400)
    values = []
    for name in names:
        value = body.get(name, "")
        if not isinstance(value, str):
            return None, (jsonify({"error": f"'{name}' must be a string."}), 400)
        values.append(value)
    return values, None


@app.route("/api/health", methods=["GET"])
def api_health():
    return jsonify({"status": "ok", "version": VERSION})


@app.route("/api/analyze", methods=["POST"])
def api_analyze():
    """
    Analyze a document and return structured JSON.

    Accepts application/json → { "text": "...", "question": "..." }
    The question is optional; when present an "answer" field is added.
    """
    values, error = _json_fields("text", "question")
    if error:
        return error
    text, question = values

    try:
        result = analyze(text)
    except Exception as e:
        app.logger.exception("Analysis failed")
        return jsonify({"error": str(e)}), 500

    response_data = result.to_dict()
    if question.strip():
        response_data["answer"] = answer_query(text, question)
    return jsonify(response_data), 200


@app.route("/api/ask", methods=["POST"])
def api_ask():
    values, error = _json_fields("text", "question")
    if error:
        return error
    text, question = values
    return jsonify({"answer": answer_query(text, question)}), 200


if __name__ == "__main__":
    import logging
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=config.DEBUG, port=config.PORT)
