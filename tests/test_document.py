"""Tests for the SVG document model."""

import pytest


def test_parse_and_index(document):
    """Ids are indexed and the root is an <svg>."""
    assert document.name == "plant.svg"
    assert document.element_by_id("boiler") is not None
    assert document.element_by_id("missing") is None


def test_invalid_svg_raises_load_error():
    """Malformed text and non-svg roots raise DiagramLoadError."""
    from pyqt_synoptic.diagram import DiagramDocument
    from pyqt_synoptic.io import DiagramLoadError

    with pytest.raises(DiagramLoadError):
        DiagramDocument.from_string("broken.svg", "<svg><g></svg>")
    with pytest.raises(DiagramLoadError):
        DiagramDocument.from_string("html.svg", "<html></html>")


def test_duplicate_ids_kept_in_order():
    """Several elements may share an id."""
    from pyqt_synoptic.diagram import DiagramDocument

    doc = DiagramDocument.from_string(
        "dup.svg",
        '<svg xmlns="http://www.w3.org/2000/svg"><g id="a" data-n="1"/><g id="a" data-n="2"/></svg>',
    )
    assert [el.get("data-n") for el in doc.elements_by_id("a")] == ["1", "2"]


def test_closest_includes_self(document):
    """closest() checks the element itself before its ancestors."""
    pressure = document.element_by_id("boiler-pressure")
    body = document.element_by_id("pump-body")

    assert document.closest(pressure, "alarm-line") is document.element_by_id("boiler-alarm")
    assert document.closest(body, "alarm-line") is body
    assert document.closest(document.element_by_id("boiler-temp"), "alarm-line") is None


def test_class_helpers():
    """add/remove class keep other classes and drop an empty attribute."""
    import xml.etree.ElementTree as ET
    from pyqt_synoptic.diagram import add_class, remove_class, has_class

    el = ET.Element("g", {"class": "a"})
    add_class(el, "b")
    add_class(el, "b")
    assert el.get("class") == "a b"
    remove_class(el, "a")
    remove_class(el, "b")
    assert "class" not in el.attrib
    assert not has_class(el, "a")


def test_style_helpers():
    """Inline style properties can be set, replaced and removed."""
    import xml.etree.ElementTree as ET
    from pyqt_synoptic.diagram import get_style_property, set_style_property

    el = ET.Element("g", {"style": "stroke: red"})
    set_style_property(el, "visibility", "hidden")
    assert get_style_property(el, "visibility") == "hidden"
    assert get_style_property(el, "stroke") == "red"

    set_style_property(el, "visibility", "visible")
    assert el.get("style") == "stroke: red; visibility: visible"

    set_style_property(el, "stroke", None)
    set_style_property(el, "visibility", None)
    assert "style" not in el.attrib


def test_serialization_has_no_namespace_prefix(document):
    """Serialized SVG keeps the default namespace without ns0 prefixes."""
    text = document.to_string()
    assert "ns0:" not in text
    assert text.startswith("<svg")


def test_scan_bound_elements(document):
    """data-key nodes are bound with kind and alarm rule."""
    from pyqt_synoptic.diagram import scan_bound_elements, ElementKind, Comparator

    bound = scan_bound_elements(document)
    by_id = {b.element_id: b for b in bound.values()}

    assert by_id["boiler-temp"].kind is ElementKind.TEXT
    assert by_id["boiler-temp"].key_path == "metrics.temperature"
    assert by_id["shield-visual-effect"].kind is ElementKind.SHAPE_ATTRIBUTE
    assert by_id["pump-body"].kind is ElementKind.ALARM_LINE
    assert by_id["pump-body"].alarm.comparator is Comparator.EQ
    assert by_id["boiler-pressure"].alarm.threshold == "30"


def test_alarm_rule_unknown_comparator():
    """Unknown comparators produce no rule."""
    import xml.etree.ElementTree as ET
    from pyqt_synoptic.diagram import AlarmRule

    el = ET.Element("text", {"data-alarm-type": "GE", "data-alarm-value": "3"})
    assert AlarmRule.from_element(el) is None


def test_baseline_restores_touched_elements(document):
    """Touched elements get their load-time text and attributes back."""
    from pyqt_synoptic.diagram import DiagramBaseline

    baseline = DiagramBaseline(document)
    label = document.element_by_id("boiler-temp")
    baseline.touch(label)
    label.text = "99"
    label.set("fill", "#f85149")

    assert baseline.restore_touched() == 1
    assert label.text == "0"
    assert "fill" not in label.attrib
    assert baseline.touched_count == 0


def test_baseline_restores_children():
    """Removed children come back in their original order."""
    from pyqt_synoptic.diagram import DiagramBaseline, DiagramDocument

    doc = DiagramDocument.from_string(
        "t.svg",
        '<svg xmlns="http://www.w3.org/2000/svg"><text id="t">a<tspan>b</tspan><tspan>c</tspan></text></svg>',
    )
    baseline = DiagramBaseline(doc)
    text = doc.element_by_id("t")
    baseline.touch(text)
    for child in list(text):
        text.remove(child)
    text.text = "9"

    baseline.restore_touched()

    assert text.text == "a"
    assert [child.text for child in text] == ["b", "c"]
