"""Decode Wolfram Alpha v2 XML responses into Result trees.

Decoding is best effort: unknown elements and attributes are ignored, and an
attribute that fails type coercion is logged and left at its zero value. Only
a document that is not well-formed XML aborts the decode.
"""

import logging
import re
from collections.abc import Callable, Iterator
from xml.sax.saxutils import escape

from lxml import etree

from alphaquery.exceptions import DecodeError, FieldCoercionFailure, MalformedDocument
from alphaquery.models.result import (
    Assumption,
    AssumptionValue,
    Error,
    ExamplePage,
    FutureTopic,
    Image,
    LanguageMessage,
    MathML,
    Pod,
    Reinterpretation,
    Result,
    Source,
    Subpod,
    Tip,
)

logger = logging.getLogger(__name__)

ROOT_TAGS = ("queryresult", "validatequeryresult")

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


# --- Coercion ---

def _parse_bool(field: str, raw: str) -> bool:
    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    raise FieldCoercionFailure(field, raw)


def _parse_int(field: str, raw: str) -> int:
    value = raw.strip()
    if not _INT_RE.fullmatch(value):
        raise FieldCoercionFailure(field, raw)
    return int(value, 10)


def _parse_float(field: str, raw: str) -> float:
    value = raw.strip()
    if not _FLOAT_RE.fullmatch(value):
        raise FieldCoercionFailure(field, raw)
    return float(value)


def _coerce(field: str, raw: str | None, parse: Callable[[str, str], object], zero):
    if raw is None:
        return zero
    try:
        return parse(field, raw)
    except FieldCoercionFailure as e:
        logger.debug("Ignoring malformed value: %s", e)
        return zero


def _bool(element, name: str) -> bool:
    return _coerce(f"{_local(element)}@{name}", element.get(name), _parse_bool, False)


def _int(element, name: str) -> int:
    return _coerce(f"{_local(element)}@{name}", element.get(name), _parse_int, 0)


def _float(element, name: str) -> float:
    return _coerce(f"{_local(element)}@{name}", element.get(name), _parse_float, 0.0)


def _str(element, name: str) -> str:
    return element.get(name, "")


def _csv(element, name: str) -> tuple[str, ...]:
    raw = element.get(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


# --- Tree navigation ---

def _local(element) -> str:
    return etree.QName(element).localname


def _children(element, name: str) -> Iterator:
    """Direct child elements with the given local name, in document order."""
    for child in element:
        # Comments and processing instructions have non-string tags
        if isinstance(child.tag, str) and _local(child) == name:
            yield child


def _child(element, name: str):
    return next(_children(element, name), None)


def _text(element, name: str) -> str:
    child = _child(element, name)
    if child is None:
        return ""
    return "".join(child.itertext())


def _inner_xml(element) -> str:
    # Leading character data comes back unescaped from lxml
    parts = [escape(element.text or "")]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


# --- Element decoders ---

def decode_error(element) -> Error:
    code = _child(element, "code")
    return Error(
        code=_coerce("error/code", "".join(code.itertext()) if code is not None else None, _parse_int, 0),
        message=_text(element, "msg"),
    )


def decode_example_page(element) -> ExamplePage:
    return ExamplePage(topic=_str(element, "category"), url=_str(element, "url"))


def decode_future_topic(element) -> FutureTopic:
    topic = _str(element, "topic")
    message = _str(element, "msg")
    nested = _child(element, "topic")
    if nested is not None:
        topic = topic or _str(nested, "topic") or _str(nested, "attr") or "".join(nested.itertext()).strip()
        message = message or _str(nested, "msg")
    return FutureTopic(topic=topic, message=message)


def decode_language_message(element) -> LanguageMessage:
    return LanguageMessage(english=_str(element, "english"), other=_str(element, "other"))


def decode_reinterpretation(element) -> Reinterpretation:
    return Reinterpretation(
        query=_str(element, "new"),
        message=_str(element, "text"),
        score=_float(element, "score"),
        level=_str(element, "level"),
    )


def decode_source(element) -> Source:
    return Source(url=_str(element, "url"), description=_str(element, "text"))


def decode_tip(element) -> Tip:
    return Tip(message=_str(element, "text"))


def decode_image(element) -> Image:
    return Image(
        url=_str(element, "src"),
        alt=_str(element, "alt"),
        title=_str(element, "title"),
        width=_int(element, "width"),
        height=_int(element, "height"),
    )


def decode_mathml(element) -> MathML:
    return MathML(xml=_inner_xml(element))


def decode_subpod(element) -> Subpod:
    img = _child(element, "img")
    mathml = _child(element, "mathml")
    return Subpod(
        title=_str(element, "title"),
        plaintext=_text(element, "plaintext"),
        image=decode_image(img) if img is not None else None,
        mathml=decode_mathml(mathml) if mathml is not None else None,
        mathematica_input=_text(element, "minput"),
        mathematica_output=_text(element, "moutput"),
        primary=_bool(element, "primary"),
    )


def decode_pod(element) -> Pod:
    error = _child(element, "error")
    return Pod(
        title=_str(element, "title"),
        scanner=_str(element, "scanner"),
        id=_str(element, "id"),
        position=_int(element, "position"),
        errored=_bool(element, "error"),
        primary=_bool(element, "primary"),
        error=decode_error(error) if error is not None else None,
        subpods=tuple(decode_subpod(s) for s in _children(element, "subpod")),
    )


def decode_assumption_value(element) -> AssumptionValue:
    return AssumptionValue(
        name=_str(element, "name"),
        description=_str(element, "desc"),
        input=_str(element, "input"),
    )


def decode_assumption(element) -> Assumption:
    return Assumption(
        type=_str(element, "type"),
        word=_str(element, "word"),
        template=_str(element, "template"),
        values=tuple(decode_assumption_value(v) for v in _children(element, "value")),
    )


def _flatten(element, name: str, wrapper: str) -> Iterator:
    """Children named `name`, bare or inside `wrapper` elements, in document order."""
    for child in element:
        if not isinstance(child.tag, str):
            continue
        tag = _local(child)
        if tag == name:
            yield child
        elif tag == wrapper:
            yield from _children(child, name)


def _optional(element, name: str, decode):
    child = _child(element, name)
    return decode(child) if child is not None else None


def decode_result(element) -> Result:
    tips = _child(element, "tips")
    return Result(
        id=_str(element, "id"),
        succeeded=_bool(element, "success"),
        errored=_bool(element, "error"),
        error=_optional(element, "error", decode_error),
        recalculate=_str(element, "recalculate"),
        datatypes=_csv(element, "datatypes"),
        timing=_float(element, "timing"),
        parse_timing=_float(element, "parsetiming"),
        parse_timed_out=_bool(element, "parsetimedout"),
        timed_out=_csv(element, "timedout"),
        version=_str(element, "version"),
        pods=tuple(decode_pod(p) for p in _children(element, "pod")),
        assumptions=tuple(decode_assumption(a) for a in _flatten(element, "assumption", "assumptions")),
        example_page=_optional(element, "examplepage", decode_example_page),
        future_topic=_optional(element, "futuretopic", decode_future_topic),
        language_message=_optional(element, "languagemsg", decode_language_message),
        reinterpretation=_optional(element, "reinterpret", decode_reinterpretation),
        suggestions=tuple(
            "".join(d.itertext()).strip() for d in _flatten(element, "didyoumean", "didyoumeans")
        ),
        tips=tuple(decode_tip(t) for t in _children(tips, "tip")) if tips is not None else (),
        sources=tuple(decode_source(s) for s in _flatten(element, "source", "sources")),
    )


# --- Entry points ---

def parse(xml: bytes | str):
    """Parse a document and return its root element.

    Raises MalformedDocument if the input is not well-formed XML.
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    try:
        # Parsers hold state, so each call gets its own
        return etree.fromstring(xml, etree.XMLParser(resolve_entities=False, no_network=True))
    except etree.XMLSyntaxError as e:
        raise MalformedDocument(f"Response is not well-formed XML: {e}") from e


def decode(xml: bytes | str) -> Result:
    """Decode a <queryresult> (or <validatequeryresult>) document into a Result."""
    root = parse(xml)
    tag = _local(root)
    if tag not in ROOT_TAGS:
        raise DecodeError(f"Unexpected root element <{tag}>, expected <queryresult>")
    return decode_result(root)


def decode_fragment(xml: bytes | str, decoder: Callable):
    """Decode a standalone element such as <error> or <img> with one of the element decoders."""
    return decoder(parse(xml))
