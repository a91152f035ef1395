"""In-memory DOM for exercising the wizard core without a browser.

Only the CSS subset the wizard uses is supported: type, ``#id``,
``.class``, attribute tests (``[a]``, ``=``, ``*=``, ``^=``, ``$=``),
selector lists and the descendant combinator.
"""

from __future__ import annotations

import html
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from domain.ports import ElementPort, WizardPagePort

Hook = Callable[["FakeElement"], Any]

_HIDDEN_TEXT_CLASSES = {"visually-hidden", "sr-only"}


# -- selector matching ------------------------------------------------------


@dataclass(frozen=True)
class _AttrTest:
    name: str
    op: str | None
    value: str | None


@dataclass(frozen=True)
class _Compound:
    tag: str | None
    ids: tuple[str, ...]
    classes: tuple[str, ...]
    attrs: tuple[_AttrTest, ...]


_TAG = re.compile(r"[a-zA-Z][\w-]*|\*")
_ID = re.compile(r"#([\w-]+)")
_CLASS = re.compile(r"\.([\w-]+)")
_ATTR = re.compile(
    r"""\[\s*([\w-]+)\s*(?:([*^$]?=)\s*(?:"([^"]*)"|'([^']*)'|([^\]\s]+))\s*)?\]"""
)


def _split_outside(text: str, separators: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    depth = 0
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch in separators and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _parse_compound(text: str) -> _Compound:
    pos = 0
    tag = None
    ids: list[str] = []
    classes: list[str] = []
    attrs: list[_AttrTest] = []
    match = _TAG.match(text)
    if match:
        tag = None if match.group(0) == "*" else match.group(0).lower()
        pos = match.end()
    while pos < len(text):
        for pattern in (_ID, _CLASS, _ATTR):
            match = pattern.match(text, pos)
            if match:
                break
        else:
            raise ValueError(f"Unsupported selector: {text!r}")
        if pattern is _ID:
            ids.append(match.group(1))
        elif pattern is _CLASS:
            classes.append(match.group(1))
        else:
            value = next((g for g in match.group(3, 4, 5) if g is not None), None)
            attrs.append(_AttrTest(match.group(1), match.group(2), value))
        pos = match.end()
    return _Compound(tag, tuple(ids), tuple(classes), tuple(attrs))


def parse_selector(selector: str) -> list[list[_Compound]]:
    return [
        [_parse_compound(part) for part in _split_outside(complex_sel, " \t\n")]
        for complex_sel in _split_outside(selector, ",")
    ]


def _matches_compound(element: FakeElement, compound: _Compound) -> bool:
    if compound.tag and element.tag != compound.tag:
        return False
    if compound.ids and element.attrs.get("id") not in compound.ids:
        return False
    own_classes = set(element.attrs.get("class", "").split())
    if any(cls not in own_classes for cls in compound.classes):
        return False
    for test in compound.attrs:
        actual = element.attrs.get(test.name)
        if actual is None:
            return False
        if test.op is None:
            continue
        wanted = test.value or ""
        if test.op == "=" and actual != wanted:
            return False
        if test.op == "*=" and (not wanted or wanted not in actual):
            return False
        if test.op == "^=" and (not wanted or not actual.startswith(wanted)):
            return False
        if test.op == "$=" and (not wanted or not actual.endswith(wanted)):
            return False
    return True


def _matches_complex(element: FakeElement, chain: list[_Compound]) -> bool:
    if not _matches_compound(element, chain[-1]):
        return False
    remaining = chain[:-1]
    ancestor = element.parent_element
    while remaining and ancestor is not None:
        if _matches_compound(ancestor, remaining[-1]):
            remaining = remaining[:-1]
        ancestor = ancestor.parent_element
    return not remaining


# -- elements ---------------------------------------------------------------


class FakeElement:
    """A mutable DOM node implementing ``ElementPort``."""

    def __init__(
        self,
        tag: str,
        attrs: dict[str, str] | None = None,
        children: Sequence[FakeElement] = (),
        *,
        text: str = "",
        value: str = "",
        checked: bool = False,
        selected: bool = False,
        visible: bool = True,
        enabled: bool = True,
        on_click: Hook | None = None,
        on_input: Hook | None = None,
    ) -> None:
        self.tag = tag.lower()
        self.attrs = dict(attrs or {})
        self.text = text
        self.value = value
        self.checked = checked
        self.selected = selected
        self.visible = visible
        self.enabled = enabled
        self.on_click = on_click
        self.on_input = on_input
        self.parent_element: FakeElement | None = None
        self.children: list[FakeElement] = []
        self.clicks = 0
        self.fills: list[str] = []
        self.typed: list[str] = []
        self.files: list[str] = []
        self.scrolled = 0
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        return f"FakeElement({self.tag!r}, {self.attrs!r})"

    # -- tree editing -------------------------------------------------------

    def append(self, child: FakeElement) -> FakeElement:
        child.parent_element = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        if self.parent_element is not None:
            self.parent_element.children.remove(self)
            self.parent_element = None

    def replace_children(self, children: Sequence[FakeElement]) -> None:
        for child in self.children:
            child.parent_element = None
        self.children = []
        for child in children:
            self.append(child)

    def iter_descendants(self) -> Iterator[FakeElement]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def root(self) -> FakeElement:
        node = self
        while node.parent_element is not None:
            node = node.parent_element
        return node

    def find_by_id(self, element_id: str) -> FakeElement | None:
        for node in self.root().iter_descendants():
            if node.attrs.get("id") == element_id:
                return node
        return None

    def select_all(self, selector: str, *, include_self: bool = False) -> list[FakeElement]:
        chains = parse_selector(selector)
        candidates = ([self] if include_self else []) + list(self.iter_descendants())
        return [node for node in candidates if any(_matches_complex(node, chain) for chain in chains)]

    @property
    def displayed(self) -> bool:
        node: FakeElement | None = self
        while node is not None:
            if not node.visible:
                return False
            node = node.parent_element
        return True

    def full_text(self, *, skip_hidden_copies: bool = False) -> str:
        if skip_hidden_copies and _HIDDEN_TEXT_CLASSES & set(self.attrs.get("class", "").split()):
            return ""
        parts = [self.text] if self.text else []
        for child in self.children:
            piece = child.full_text(skip_hidden_copies=skip_hidden_copies)
            if piece:
                parts.append(piece)
        return " ".join(parts)

    def to_html(self) -> str:
        attrs = "".join(f' {k}="{html.escape(v)}"' for k, v in self.attrs.items())
        inner = html.escape(self.text) + "".join(child.to_html() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    # -- ElementPort --------------------------------------------------------

    async def query_all(self, selector: str) -> Sequence[FakeElement]:
        return self.select_all(selector)

    async def query(self, selector: str) -> FakeElement | None:
        found = self.select_all(selector)
        return found[0] if found else None

    async def parent(self) -> FakeElement | None:
        return self.parent_element

    async def get_attribute(self, name: str) -> str | None:
        return self.attrs.get(name)

    async def tag_name(self) -> str:
        return self.tag

    async def text_content(self) -> str:
        return self.full_text()

    async def visible_text(self) -> str:
        return self.full_text(skip_hidden_copies=True)

    async def input_value(self) -> str:
        if self.tag == "select":
            for option in self.select_all("option"):
                if option.selected:
                    return option.attrs.get("value", option.text)
            return ""
        return self.value

    async def is_visible(self) -> bool:
        return self.displayed

    async def is_enabled(self) -> bool:
        return self.enabled

    async def is_checked(self) -> bool:
        return self.checked

    async def click(self) -> None:
        if not self.displayed:
            raise RuntimeError(f"{self!r} is not visible")
        if not self.enabled:
            raise RuntimeError(f"{self!r} is disabled")
        self.clicks += 1
        target: FakeElement | None = self
        if self.tag == "label" and self.attrs.get("for"):
            target = self.find_by_id(self.attrs["for"])
        if target is not None and target.tag == "input":
            kind = target.attrs.get("type", "text")
            if kind == "checkbox":
                target._set_checked(not target.checked)
            elif kind == "radio":
                target._set_checked(True)
        if self.on_click is not None:
            self.on_click(self)

    async def fill(self, value: str) -> None:
        self.value = value
        self.fills.append(value)
        if self.on_input is not None:
            self.on_input(self)

    async def type_text(self, value: str, *, delay_ms: int = 0) -> None:
        self.value += value
        self.typed.append(value)
        if self.on_input is not None:
            self.on_input(self)

    async def set_checked(self, checked: bool) -> None:
        self._set_checked(checked)

    async def select_option(self, value: str) -> None:
        options = self.select_all("option")
        chosen = next((o for o in options if o.attrs.get("value", o.text) == value), None)
        if chosen is None:
            chosen = next((o for o in options if o.text == value), None)
        if chosen is None:
            raise ValueError(f"No option {value!r} in {self!r}")
        for option in options:
            option.selected = option is chosen
        self.value = chosen.attrs.get("value", chosen.text)

    async def set_input_files(self, path: str) -> None:
        self.files.append(path)
        if self.on_input is not None:
            self.on_input(self)

    async def scroll_into_view(self) -> None:
        return None

    async def scroll_by(self, pixels: int) -> None:
        self.scrolled += pixels

    async def wait_until_visible(self, timeout_ms: int) -> bool:
        return self.displayed

    # -- internal helpers ---------------------------------------------------

    def _set_checked(self, checked: bool) -> None:
        if checked and self.attrs.get("type") == "radio" and self.attrs.get("name"):
            for other in self.root().select_all(f'input[name="{self.attrs["name"]}"]'):
                other.checked = False
        self.checked = checked


def h(tag: str, attrs: dict[str, str] | None = None, *children: FakeElement, **state: Any) -> FakeElement:
    """Shorthand element builder: ``h("div", {"class": "x"}, h("input"))``."""
    return FakeElement(tag, attrs, children, **state)


# -- page -------------------------------------------------------------------


class FakeWizardPage:
    """``WizardPagePort`` over a FakeElement document."""

    def __init__(self, *children: FakeElement) -> None:
        self.document = FakeElement("html", children=(FakeElement("body", children=children),))
        self.waits: list[int] = []
        self.wait_for_calls: list[tuple[str, str, int]] = []
        self.keys: list[str] = []
        self.pdfs: list[tuple[str, str]] = []
        self.chooser_uploads: list[tuple[FakeElement, str]] = []
        self.file_chooser_result = True
        self.on_key: Callable[[str], Any] | None = None

    @property
    def body(self) -> FakeElement:
        return self.document.children[0]

    async def query_all(self, selector: str) -> Sequence[FakeElement]:
        return self.document.select_all(selector, include_self=True)

    async def query(self, selector: str) -> FakeElement | None:
        found = self.document.select_all(selector, include_self=True)
        return found[0] if found else None

    async def wait(self, ms: int) -> None:
        self.waits.append(ms)

    async def wait_for(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int = 5000,
    ) -> bool:
        self.wait_for_calls.append((selector, state, timeout_ms))
        any_visible = any(node.displayed for node in await self.query_all(selector))
        if state == "hidden":
            return not any_visible
        return any_visible

    async def press_key(self, key: str) -> None:
        self.keys.append(key)
        if self.on_key is not None:
            self.on_key(key)

    async def content(self) -> str:
        return self.document.to_html()

    async def render_pdf(self, html_text: str, path: str) -> None:
        self.pdfs.append((html_text, path))
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "wb") as handle:
            handle.write(b"%PDF-1.4 fake")

    async def upload_via_file_chooser(self, trigger: FakeElement, path: str) -> bool:
        self.chooser_uploads.append((trigger, path))
        return self.file_chooser_result


_element_check: ElementPort = FakeElement("div")
_page_check: WizardPagePort = FakeWizardPage()
