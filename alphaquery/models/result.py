from urllib.parse import parse_qs, urlsplit
from xml.sax.saxutils import escape

from pydantic import BaseModel, ConfigDict

from alphaquery.exceptions import NoPrimaryPod, NoSubpods

# Quotes and whitespace are written as numeric character references
_ATTR_ENTITIES = {'"': "&#34;", "'": "&#39;", "\t": "&#x9;", "\n": "&#xA;", "\r": "&#xD;"}


class _Element(BaseModel):
    model_config = ConfigDict(frozen=True)


class Error(_Element):
    code: int = 0
    message: str = ""


class ExamplePage(_Element):
    topic: str = ""
    url: str = ""


class FutureTopic(_Element):
    topic: str = ""
    message: str = ""


class LanguageMessage(_Element):
    english: str = ""
    other: str = ""


class Reinterpretation(_Element):
    query: str = ""
    message: str = ""
    score: float = 0.0
    level: str = ""


class Source(_Element):
    url: str = ""
    description: str = ""


class Tip(_Element):
    message: str = ""


class Image(_Element):
    url: str = ""
    alt: str = ""
    title: str = ""
    width: int = 0
    height: int = 0

    def mime(self) -> str:
        """MIME type from the MSPStoreType query parameter, or "" if unknown."""
        try:
            query = urlsplit(self.url).query
        except ValueError:
            return ""
        values = parse_qs(query).get("MSPStoreType")
        return values[0] if values else ""

    def html(self) -> str:
        """Self-closing <img> tag for displaying the image in a web page."""
        attrs = [("src", self.url), ("alt", self.alt), ("title", self.title)]
        if self.width:
            attrs.append(("width", str(self.width)))
        if self.height:
            attrs.append(("height", str(self.height)))
        rendered = " ".join(f'{name}="{escape(value, _ATTR_ENTITIES)}"' for name, value in attrs)
        return f"<img {rendered}/>"


class MathML(_Element):
    xml: str = ""


class Subpod(_Element):
    title: str = ""
    plaintext: str = ""
    image: Image | None = None
    mathml: MathML | None = None
    mathematica_input: str = ""
    mathematica_output: str = ""
    primary: bool = False


class Pod(_Element):
    title: str = ""
    scanner: str = ""
    id: str = ""
    position: int = 0
    errored: bool = False
    primary: bool = False
    error: Error | None = None
    subpods: tuple[Subpod, ...] = ()


class AssumptionValue(_Element):
    name: str = ""
    description: str = ""
    input: str = ""


class Assumption(_Element):
    type: str = ""
    word: str = ""
    template: str = ""
    values: tuple[AssumptionValue, ...] = ()

    @property
    def default(self) -> AssumptionValue | None:
        # The first value is the interpretation the result was computed with
        return self.values[0] if self.values else None


class Result(_Element):
    id: str = ""
    succeeded: bool = False
    errored: bool = False
    error: Error | None = None
    recalculate: str = ""
    datatypes: tuple[str, ...] = ()
    timing: float = 0.0
    parse_timing: float = 0.0
    parse_timed_out: bool = False
    timed_out: tuple[str, ...] = ()
    version: str = ""
    pods: tuple[Pod, ...] = ()
    assumptions: tuple[Assumption, ...] = ()
    example_page: ExamplePage | None = None
    future_topic: FutureTopic | None = None
    language_message: LanguageMessage | None = None
    reinterpretation: Reinterpretation | None = None
    suggestions: tuple[str, ...] = ()
    tips: tuple[Tip, ...] = ()
    sources: tuple[Source, ...] = ()

    def usable_pods(self) -> tuple[Pod, ...]:
        """Pods a consumer may rely on: none at all unless the query succeeded."""
        return self.pods if self.succeeded else ()

    def primary_text(self) -> str:
        """Plaintext of the first subpod of the first usable pod marked primary.

        Raises NoPrimaryPod if no pod is primary, NoSubpods if that pod is empty.
        """
        for pod in self.usable_pods():
            if not pod.primary:
                continue
            if not pod.subpods:
                raise NoSubpods(f"Primary pod {pod.id or pod.title!r} has no subpods")
            return pod.subpods[0].plaintext
        raise NoPrimaryPod("No pod in the result is marked primary")
