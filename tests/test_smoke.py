from fastapi.testclient import TestClient

import converter.decode as decoding
from converter import rules
from converter.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_convert_csv_to_json():
    r = client.post("/convert", json={"mode": "csv2json", "input": "name,age\nAlice,30"})
    assert r.status_code == 200

    data = r.json()
    assert data["error"] is None
    assert data["filename"] == "converted.json"
    assert data["output"] == '[\n  {\n    "name": "Alice",\n    "age": "30"\n  }\n]'

def test_convert_failure_is_reported_in_body():
    r = client.post("/convert", json={"mode": "json2csv", "input": "[]"})
    assert r.status_code == 200

    data = r.json()
    assert data["output"] == ""
    assert data["error"] == {"message": "Conversion failed", "details": "JSON array cannot be empty"}

def test_convert_blank_input():
    r = client.post("/convert", json={"mode": "json2csv", "input": " \n "})
    assert r.json()["error"] == {"message": "Please enter some data to convert", "details": None}

def test_convert_rejects_unknown_mode():
    r = client.post("/convert", json={"mode": "xml2csv", "input": "a\n1"})
    assert r.status_code == 422

def test_upload_decodes_and_hints_mode():
    # Latin-1 bytes are not valid UTF-8; detection has to pick the codec
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")

    files = {"file": ("test.csv", raw, "text/csv")}
    r = client.post("/upload", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["filename"] == "test.csv"
    assert data["mode"] == "csv2json"
    assert "Montréal" in data["content"]

def test_upload_strips_utf8_bom():
    raw = '\ufeff[{"a": 1}]'.encode("utf-8")

    files = {"file": ("rows.json", raw, "application/json")}
    data = client.post("/upload", files=files).json()
    assert data["mode"] == "json2csv"
    assert data["content"] == '[{"a": 1}]'

def test_upload_unknown_extension_has_no_mode():
    files = {"file": ("rows.txt", b"a,b\n1,2", "text/plain")}
    data = client.post("/upload", files=files).json()
    assert data["mode"] is None
    assert data["content"] == "a,b\n1,2"

def test_download_attachment():
    r = client.post("/download", json={"mode": "json2csv", "input": '[{"a": "x,y"}]'})
    assert r.status_code == 200
    assert 'filename="converted.csv"' in r.headers["content-disposition"]
    assert r.text == 'a\n"x,y"'

def test_download_failed_conversion():
    r = client.post("/download", json={"mode": "csv2json", "input": "a,b"})
    assert r.status_code == 422
    assert r.json()["detail"]["message"] == "Conversion failed"

def test_session_event():
    body = {
        "session": {"mode": "csv2json", "input": "a\n1", "output": "", "error": None},
        "event": {"type": "convert_requested"},
    }
    r = client.post("/session", json=body)
    assert r.status_code == 200
    assert r.json()["output"] == '[\n  {\n    "a": "1"\n  }\n]'

    toggled = client.post("/session", json={"session": r.json(), "event": {"type": "mode_toggled"}}).json()
    assert toggled["mode"] == "json2csv"
    assert toggled["output"] == ""
    assert toggled["error"] is None

class _Guess:
    def __init__(self, encoding):
        self.encoding = encoding

class _Matches:
    def __init__(self, guess):
        self._guess = guess

    def best(self):
        return self._guess

def test_upload_undecodable_bytes(monkeypatch):
    monkeypatch.setattr(decoding, "from_bytes", lambda raw: _Matches(None))

    files = {"file": ("rows.csv", b"a,b\n\xff\xfe,\x80", "text/csv")}
    r = client.post("/upload", files=files)
    assert r.status_code == 422
    assert r.json()["detail"] == rules.MSG_FILE_READ_FAILED

def test_upload_unknown_codec_falls_back_to_utf8(monkeypatch):
    monkeypatch.setattr(decoding, "from_bytes", lambda raw: _Matches(_Guess("no-such-codec")))

    files = {"file": ("rows.csv", "a,b\nx,ü".encode("utf-8"), "text/csv")}
    data = client.post("/upload", files=files).json()
    assert data["content"] == "a,b\nx,ü"
    assert data["encoding"] == "utf-8-sig"
