import pytest
import serial

from core.errors import ScanError
from modules.scanner import (
    PromptBarcodeScanner,
    SerialBarcodeScanner,
    SimulatedBarcodeScanner,
    get_scanner,
)
from modules.scanner import barcode_reader


class FakeSerial:
    def __init__(self, lines):
        self.lines = list(lines)
        self.closed = False

    def readline(self):
        return self.lines.pop(0) if self.lines else b""

    def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_simulated_scanner_returns_fixed_code():
    assert await SimulatedBarcodeScanner(code="SKU-1", delay=0).scan() == "SKU-1"


@pytest.mark.asyncio
async def test_prompt_scanner_strips_answer():
    scanner = PromptBarcodeScanner(input_func=lambda prompt: "  SKU-42 \n")
    assert await scanner.scan() == "SKU-42"


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", ["", "   "])
async def test_prompt_scanner_empty_answer_is_cancel(answer):
    with pytest.raises(ScanError):
        await PromptBarcodeScanner(input_func=lambda prompt: answer).scan()


@pytest.mark.asyncio
async def test_prompt_scanner_end_of_input_is_cancel():
    def closed(prompt):
        raise EOFError

    with pytest.raises(ScanError):
        await PromptBarcodeScanner(input_func=closed).scan()


@pytest.mark.asyncio
async def test_serial_scanner_reads_first_code(monkeypatch):
    port = FakeSerial([b"", b"  \r\n", b"4006381333931\r\n"])
    monkeypatch.setattr(barcode_reader.serial, "Serial", lambda *a, **kw: port)

    code = await SerialBarcodeScanner(port="COM3", timeout=1).scan()

    assert code == "4006381333931"
    assert port.closed


def test_serial_scanner_timeout(monkeypatch):
    monkeypatch.setattr(barcode_reader.serial, "Serial", lambda *a, **kw: FakeSerial([]))
    with pytest.raises(ScanError):
        SerialBarcodeScanner(port="COM3", timeout=0.05).read_code()


def test_serial_scanner_no_ports(monkeypatch):
    monkeypatch.setattr(barcode_reader.serial.tools.list_ports, "comports", lambda: [])
    with pytest.raises(ScanError):
        SerialBarcodeScanner().read_code()
    assert barcode_reader.check_barcode_hardware() is False


def test_serial_scanner_port_unavailable(monkeypatch):
    def unavailable(*args, **kwargs):
        raise serial.SerialException("access denied")

    monkeypatch.setattr(barcode_reader.serial, "Serial", unavailable)
    with pytest.raises(ScanError):
        SerialBarcodeScanner(port="COM3").read_code()
    assert barcode_reader.check_barcode_hardware(port="COM3") is False


def test_get_scanner_modes():
    assert isinstance(get_scanner("serial"), SerialBarcodeScanner)
    assert isinstance(get_scanner("simulated"), SimulatedBarcodeScanner)
    assert isinstance(get_scanner("prompt"), PromptBarcodeScanner)
    with pytest.raises(ValueError):
        get_scanner("laser")


class TestScanEndpoint:
    @pytest.fixture
    def use_scanner(self):
        from app import fastapi_app
        from common.deps import get_scanner as scanner_dep

        def _use(scanner):
            fastapi_app.dependency_overrides[scanner_dep] = lambda: scanner
        return _use

    def test_scan_success(self, client, use_scanner):
        use_scanner(SimulatedBarcodeScanner(code="SKU-9", delay=0))
        resp = client.post("/api/scanner/scan")
        assert resp.status_code == 200
        assert resp.json() == {"status": "scanned", "code": "SKU-9", "detail": None}

    def test_scan_cancelled(self, client, use_scanner):
        use_scanner(PromptBarcodeScanner(input_func=lambda prompt: ""))
        resp = client.post("/api/scanner/scan")
        assert resp.status_code == 200
        assert resp.json()["status"] == "error"
        assert resp.json()["code"] is None
