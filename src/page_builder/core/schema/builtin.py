"""Default component registry used when no registry file is given."""

from typing import Any


def _field(label: str, name: str) -> dict[str, Any]:
    return {
        "config": {"props": {"formItem": {"label": label, "name": name}, "formWrap": {}}, "style": {}},
        "events": [],
        "methods": [],
    }


BUILTIN_COMPONENTS: dict[str, dict[str, Any]] = {
    "Text": {
        "config": {"props": {"text": "Text"}, "style": {}},
        "events": [{"value": "onClick", "name": "Click"}],
        "methods": [],
    },
    "Button": {
        "config": {"props": {"text": "Button", "type": "primary"}, "style": {}},
        "events": [{"value": "onClick", "name": "Click"}],
        "methods": [],
    },
    "Card": {
        "config": {"props": {"title": "Card", "bordered": True}, "style": {}},
        "events": [],
        "methods": [],
    },
    "Flex": {
        "config": {"props": {"gap": 8, "wrap": "nowrap"}, "style": {}},
        "events": [],
        "methods": [],
    },
    "Form": {
        "config": {"props": {"layout": "horizontal", "labelCol": {"span": 4}}, "style": {}},
        "events": [
            {"value": "onFinish", "name": "Submit"},
            {"value": "onChange", "name": "Values changed"},
        ],
        "methods": [
            {"name": "submit", "title": "Submit form"},
            {"name": "reset", "title": "Reset form"},
        ],
        "elements": [{"type": "Input", "name": "Input"}],
    },
    "SearchForm": {
        "config": {"props": {"layout": "inline"}, "style": {}},
        "events": [{"value": "onSearch", "name": "Search"}, {"value": "onReset", "name": "Reset"}],
        "methods": [{"name": "reset", "title": "Reset form"}],
        "elements": [{"type": "Input", "name": "Keyword"}],
    },
    "Modal": {
        "config": {"props": {"title": "Dialog", "width": 520}, "style": {}},
        "events": [{"value": "onOk", "name": "Confirm"}, {"value": "onCancel", "name": "Cancel"}],
        "methods": [{"name": "open", "title": "Open"}, {"name": "close", "title": "Close"}],
        "elements": [{"type": "Text", "name": "Content"}],
    },
    "Input": _field("Input", "input"),
    "InputNumber": _field("Number", "number"),
    "TextArea": _field("Text area", "textarea"),
    "Select": _field("Select", "select"),
    "Switch": _field("Switch", "switch"),
    "DatePicker": _field("Date", "date"),
}
