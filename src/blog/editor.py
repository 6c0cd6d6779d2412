import re
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString
from pydantic import BaseModel, Field, model_validator
from typing_extensions import Self

from logger import logger

TOGGLE_TAGS = ('strong', 'em', 'u', 's', 'p')
BLOCK_KINDS = ('h1', 'h2', 'h3', 'ul', 'ol')
FORMAT_TAGS = ['strong', 'b', 'em', 'i', 'u', 's', 'span', 'font']
VOID_TAGS = ['br', 'img', 'hr', 'input']

HEADING_PLACEHOLDER = 'Heading'
LIST_ITEM_PLACEHOLDER = 'List item'

SAFE_COLOR = re.compile(r'^[#a-zA-Z0-9(),.%\s]+$')


class TextRange(BaseModel):
    """A selection as character offsets into the document's text content."""
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode='after')
    def ordered(self) -> Self:
        if self.end < self.start:
            raise ValueError("Selection end must not be before its start")
        return self

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end


class RichTextDocument():
    """
    HTML content edited through operations on a text selection.

    Every operation works on ``TextRange`` offsets rather than DOM nodes and
    returns the range the caller should select next. ``html`` always holds
    the re-serialized document.
    """

    def __init__(self, html: str = ""):
        self._load(html or "")

    def _load(self, html: str):
        self.soup = BeautifulSoup(html, 'html.parser')

    @property
    def html(self) -> str:
        return self.soup.decode()

    @property
    def text(self) -> str:
        return "".join(str(node) for node in self._text_nodes())

    def selected_text(self, range: TextRange) -> str:
        return self.text[range.start:range.end]

    # Node helpers

    def _text_nodes(self) -> list[NavigableString]:
        return [
            node for node in self.soup.find_all(string=True)
            if isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
        ]

    def _check_range(self, range: TextRange):
        if range.end > len(self.text):
            raise ValueError(f"Selection {range.start}-{range.end} is outside the document")

    def _isolate(self, range: TextRange) -> list[NavigableString]:
        """
        Splits text nodes at the range boundaries and returns the nodes that
        now lie entirely inside the range, in document order.
        """
        selected = []
        offset = 0
        for node in self._text_nodes():
            text = str(node)
            node_start, node_end = offset, offset + len(text)
            offset = node_end
            if node_end <= range.start or node_start >= range.end:
                continue

            cut_start = max(range.start, node_start) - node_start
            cut_end = min(range.end, node_end) - node_start
            middle = NavigableString(text[cut_start:cut_end])
            node.replace_with(middle)
            if text[:cut_start]:
                middle.insert_before(NavigableString(text[:cut_start]))
            if text[cut_end:]:
                middle.insert_after(NavigableString(text[cut_end:]))
            selected.append(middle)
        return selected

    def _insertion_point(self, offset: int) -> tuple[Optional[PageElement], Tag]:
        """
        Returns ``(anchor, parent)`` so new content goes right after ``anchor``,
        or at the start of ``parent`` when the anchor is None.
        """
        position = 0
        nodes = self._text_nodes()
        for node in nodes:
            text = str(node)
            if position + len(text) >= offset:
                split_at = offset - position
                if split_at == 0:
                    previous = node.previous_sibling
                    return previous, node.parent
                head = NavigableString(text[:split_at])
                node.replace_with(head)
                if text[split_at:]:
                    head.insert_after(NavigableString(text[split_at:]))
                return head, head.parent
            position += len(text)
        if nodes:
            return nodes[-1], nodes[-1].parent
        return None, self.soup

    def _insert_at(self, offset: int, element: PageElement):
        anchor, parent = self._insertion_point(offset)
        if anchor is None:
            parent.insert(0, element)
        else:
            anchor.insert_after(element)

    def _replace_selection(self, range: TextRange, element: PageElement):
        """Puts ``element`` where the selected text was."""
        nodes = self._isolate(range)
        if not nodes:
            self._insert_at(range.start, element)
            return
        nodes[0].insert_before(element)
        parents = {id(node.parent): node.parent for node in nodes}
        for node in nodes:
            node.extract()
        self._prune_empty(parents.values())

    def _prune_empty(self, elements):
        for element in elements:
            while (
                isinstance(element, Tag)
                and element is not self.soup
                and element.name not in VOID_TAGS
                and not element.get_text()
                and not element.find(VOID_TAGS)
            ):
                parent = element.parent
                element.decompose()
                element = parent

    def _split_around(self, child: PageElement, keep_wrapper: bool) -> PageElement:
        """
        Splits the parent of ``child`` so that ``child`` sits alone in its own
        copy of the parent. Returns that copy, or ``child`` itself once the
        copy is unwrapped.
        """
        parent = child.parent
        index = next(i for i, item in enumerate(parent.contents) if item is child)
        before = list(parent.contents[:index])
        after = list(parent.contents[index + 1:])
        if before:
            left = self.soup.new_tag(parent.name, attrs=dict(parent.attrs))
            parent.insert_before(left)
            for item in before:
                left.append(item.extract())
        if after:
            right = self.soup.new_tag(parent.name, attrs=dict(parent.attrs))
            parent.insert_after(right)
            for item in after:
                right.append(item.extract())
        if keep_wrapper:
            return parent
        parent.unwrap()
        return child

    def _lift_out(self, node: NavigableString, ancestor: Tag):
        """Moves ``node`` out of ``ancestor``, keeping any formatting in between."""
        unit = node
        while unit.parent is not ancestor:
            unit = self._split_around(unit, keep_wrapper=True)
        self._split_around(unit, keep_wrapper=False)

    # Operations

    def apply_inline_style(self, range: TextRange, tag: str) -> TextRange:
        """
        Wraps the selection in ``tag``. When every selected character already
        sits inside ``tag`` the formatting is removed instead.
        """
        if tag not in TOGGLE_TAGS:
            raise ValueError(f"Unsupported inline tag: {tag}")
        self._check_range(range)
        if range.is_collapsed:
            return range

        nodes = [node for node in self._isolate(range) if str(node)]
        if nodes and all(node.find_parent(tag) is not None for node in nodes):
            for node in nodes:
                ancestor = node.find_parent(tag)
                while ancestor is not None:
                    self._lift_out(node, ancestor)
                    ancestor = node.find_parent(tag)
        else:
            for node in nodes:
                if node.find_parent(tag) is None:
                    node.wrap(self.soup.new_tag(tag))
        return range

    def insert_block(self, range: TextRange, kind: str) -> TextRange:
        """
        Replaces the selection with a heading or a one-item list. An empty
        selection inserts a placeholder and returns a range selecting it.
        """
        if kind not in BLOCK_KINDS:
            raise ValueError(f"Unsupported block kind: {kind}")
        self._check_range(range)

        selected = self.selected_text(range)
        placeholder = LIST_ITEM_PLACEHOLDER if kind in ('ul', 'ol') else HEADING_PLACEHOLDER
        content = selected or placeholder

        block = self.soup.new_tag(kind)
        if kind in ('ul', 'ol'):
            item = self.soup.new_tag('li')
            item.string = content
            block.append(item)
        else:
            block.string = content

        self._replace_selection(range, block)
        return TextRange(start=range.start, end=range.start + len(content))

    def insert_link(self, range: TextRange, url: str) -> TextRange:
        """Links the selected text, or inserts the URL itself as the link text."""
        if not url or not url.strip():
            raise ValueError("A link needs a URL")
        self._check_range(range)

        content = self.selected_text(range) or url.strip()
        link = self.soup.new_tag('a', href=url.strip())
        link.string = content
        self._replace_selection(range, link)
        return TextRange(start=range.start, end=range.start + len(content))

    def apply_color(self, range: TextRange, color: str) -> TextRange:
        if not color or not SAFE_COLOR.match(color):
            raise ValueError(f"Invalid color: {color}")
        self._check_range(range)
        if range.is_collapsed:
            return range
        for node in self._isolate(range):
            if str(node):
                node.wrap(self.soup.new_tag('span', style=f"color: {color.strip()}"))
        return range

    def remove_format(self, range: TextRange) -> TextRange:
        self._check_range(range)
        for node in self._isolate(range):
            ancestor = node.find_parent(FORMAT_TAGS)
            while ancestor is not None:
                self._lift_out(node, ancestor)
                ancestor = node.find_parent(FORMAT_TAGS)
        return range

    def execute(self, command: str, range: TextRange, value: Optional[str] = None) -> TextRange:
        """Runs a toolbar command against the selection."""
        toggles = {
            'bold': 'strong',
            'italic': 'em',
            'underline': 'u',
            'strikeThrough': 's',
            'paragraph': 'p',
        }
        if command in toggles:
            snapshot = self.html
            try:
                return self.apply_inline_style(range, toggles[command])
            except Exception as e:
                logger.warning(f"[EDITOR] Toggling {toggles[command]} failed, content left unchanged: {e}")
                self._load(snapshot)
                return range
        if command == 'formatBlock':
            kind = (value or "").replace('<', '').replace('>', '').strip().lower()
            return self.insert_block(range, kind)
        if command == 'insertUnorderedList':
            return self.insert_block(range, 'ul')
        if command == 'insertOrderedList':
            return self.insert_block(range, 'ol')
        if command == 'createLink':
            return self.insert_link(range, value)
        if command == 'foreColor':
            return self.apply_color(range, value)
        if command == 'removeFormat':
            return self.remove_format(range)
        raise ValueError(f"Unknown editor command: {command}")


class EditorCommandRequest(BaseModel):
    html: str = ""
    command: str
    value: Optional[str] = None
    start: int = Field(default=0, ge=0)
    end: int = Field(default=0, ge=0)


class EditorCommandResponse(BaseModel):
    html: str
    start: int
    end: int
