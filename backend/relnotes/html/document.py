"""
Release notes generator — HTML document helpers.

Thin layer over xml.etree.ElementTree for building the release notes
page: headers, paragraphs, links, tables, lists and sections that
register themselves in a table of contents.

Section builders produce detached Section values; render_section()
attaches them to the page.
"""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

BANNER_LEVEL = 1
MAIN_SECTION_LEVEL = 2
DEFAULT_TABLE_BORDER_WIDTH = 2

_WHITESPACE = re.compile(r"\s+")


@dataclass
class Section:
    """A titled division of the page with its own table of contents entry."""

    title: str
    body: ET.Element = field(default_factory=lambda: ET.Element("div"))
    toc_label: ET.Element | None = None
    subsections: list["Section"] = field(default_factory=list)
    has_toc: bool = False
    rule_between_subsections: bool = False


def anchor_name(title: str) -> str:
    return _WHITESPACE.sub("_", title.strip())


def text_element(tag: str, text: str) -> ET.Element:
    element = ET.Element(tag)
    element.text = text
    return element


def append_text(parent: ET.Element, text: str | None) -> None:
    """Append character data after whatever parent already holds."""
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def clone_children(source: ET.Element, target: ET.Element) -> None:
    """Deep-copy the content of source (text and child elements) into target."""
    append_text(target, source.text)
    for child in source:
        target.append(copy.deepcopy(child))


def strip_namespaces(root: ET.Element) -> None:
    """Rewrite {namespace}name tags and attribute keys to plain names, in place."""
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith("{"):
            element.tag = element.tag.split("}", 1)[1]
        for key in [k for k in element.attrib if k.startswith("{")]:
            element.attrib[key.split("}", 1)[1]] = element.attrib.pop(key)


def new_document(title_text: str) -> tuple[ET.Element, ET.Element]:
    html = ET.Element("html")
    head = ET.SubElement(html, "head")
    head.append(text_element("title", title_text))
    body = ET.SubElement(html, "body")
    return html, body


def create_header(parent: ET.Element, level: int, text: str) -> ET.Element:
    header = text_element(f"h{level}", text)
    parent.append(header)
    return header


def add_paragraph(parent: ET.Element, text: str) -> ET.Element:
    paragraph = text_element("p", text)
    parent.append(paragraph)
    return paragraph


def create_list(parent: ET.Element) -> ET.Element:
    return ET.SubElement(parent, "ul")


def add_list_item(list_element: ET.Element) -> ET.Element:
    return ET.SubElement(list_element, "li")


def add_headlined_item(list_element: ET.Element, headline: str, text: str) -> ET.Element:
    item = add_list_item(list_element)
    item.append(text_element("b", headline))
    append_text(item, f" - {text}")
    return item


def create_link(href: str, label: str) -> ET.Element:
    link = text_element("a", label)
    link.set("href", href)
    return link


def create_table(parent: ET.Element, border: int, headers: list[str]) -> ET.Element:
    table = ET.SubElement(parent, "table", border=str(border))
    header_row = ET.SubElement(table, "tr")
    for headline in headers:
        header_row.append(text_element("th", headline))
    return table


def insert_row(table: ET.Element) -> ET.Element:
    return ET.SubElement(table, "tr")


def insert_column(row: ET.Element) -> ET.Element:
    return ET.SubElement(row, "td")


def insert_line(parent: ET.Element) -> ET.Element:
    return ET.SubElement(parent, "hr")


def create_section(
    parent: ET.Element,
    level: int,
    toc: ET.Element,
    title: str,
    toc_label: ET.Element | None = None,
) -> ET.Element:
    """
    Add a heading with an anchor to parent and a matching link to toc.

    Returns the <blockquote> that holds the section's content.
    """
    name = anchor_name(title)

    header = ET.SubElement(parent, f"h{level}")
    anchor = text_element("a", title)
    anchor.set("name", name)
    header.append(anchor)

    toc_link = ET.SubElement(add_list_item(toc), "a", href=f"#{name}")
    if toc_label is None:
        toc_link.text = title
    else:
        clone_children(toc_label, toc_link)

    return ET.SubElement(parent, "blockquote")


def render_section(parent: ET.Element, level: int, toc: ET.Element, section: Section) -> ET.Element:
    block = create_section(parent, level, toc, section.title, section.toc_label)
    clone_children(section.body, block)
    if section.has_toc or section.subsections:
        nested_toc = create_list(block)
        for sub in section.subsections:
            if section.rule_between_subsections:
                insert_line(block)
            render_section(block, level + 1, nested_toc, sub)
    return block


def serialize(html: ET.Element) -> str:
    return "<!DOCTYPE html>\n" + ET.tostring(html, encoding="unicode", method="html") + "\n"
