"""Polarion XML serialization for report models."""

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from .errors import ReportReadError, ReportWriteError, SerializationError
from .models import PropertyEntry, ReportModel

XML_HEADER = b'<?xml version="1.0" encoding="UTF-8"?>\n'

# Characters outside the XML 1.0 Char production, lone surrogates included.
_ILLEGAL_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def _clean(value: str) -> str:
    return _ILLEGAL_XML_CHARS.sub("\ufffd", value)


def build_element(model: ReportModel) -> ET.Element:
    """Build the ``testsuite`` element tree for a report model."""
    testsuite = ET.Element("testsuite")
    properties = ET.SubElement(testsuite, "properties")
    for prop in model.properties:
        ET.SubElement(properties, "property", name=_clean(prop.name), value=_clean(prop.value))
    for case in model.test_cases:
        ET.SubElement(testsuite, "testcase", name=_clean(case.name))
    return testsuite


def serialize(model: ReportModel) -> bytes:
    """Encode a report model as a UTF-8 XML document."""
    root = build_element(model)
    ET.indent(root, space="  ")
    try:
        body = ET.tostring(root, encoding="unicode").encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to generate Polarion report: {exc}") from exc
    return XML_HEADER + body + b"\n"


def write_report(model: ReportModel, path: str | Path) -> Path:
    """Serialize the model and write it to ``path``, truncating any old file."""
    data = serialize(model)
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise ReportWriteError(f"Failed to create Polarion report file: {path}: {exc}") from exc
    return path


def parse_report(path: str | Path) -> ReportModel:
    """Read a Polarion report back into a report model."""
    try:
        root = ET.parse(path).getroot()
    except OSError as exc:
        raise ReportReadError(f"Cannot read Polarion report {path}: {exc}") from exc
    except ET.ParseError as exc:
        raise SerializationError(f"Malformed Polarion report {path}: {exc}") from exc

    if root.tag != "testsuite":
        raise SerializationError(f"Expected <testsuite> root in {path}, found <{root.tag}>")

    properties = [
        PropertyEntry(name=prop.get("name", ""), value=prop.get("value", ""))
        for prop in root.findall("properties/property")
    ]
    model = ReportModel()
    model.initialize(properties)
    for testcase in root.findall("testcase"):
        model.record_test_case(testcase.get("name", ""))
    return model
