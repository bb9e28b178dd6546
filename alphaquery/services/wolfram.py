import logging
from enum import Enum

import requests

from alphaquery.config import get_settings
from alphaquery.decoder import decode
from alphaquery.exceptions import AuthenticationError, IntegrationError, NoPrimaryPod, RateLimitError
from alphaquery.models.result import Result

logger = logging.getLogger(__name__)

# API-level <error> codes that mean the AppID itself is the problem
APP_ID_ERROR_CODES = {1, 2}


class Format(str, Enum):
    PLAINTEXT = "plaintext"
    IMAGE = "image"
    MATHEMATICA_INPUT = "minput"
    MATHEMATICA_OUTPUT = "moutput"
    CELL = "cell"
    MATHML = "mathml"
    IMAGE_MAP = "imagemap"
    SOUND = "sound"
    WAV = "wav"


class UnitSystem(str, Enum):
    IMPERIAL = "nonmetric"
    METRIC = "metric"
    # Let Wolfram Alpha pick the units used at the caller's location
    LOCATION = "location"


class Client:
    """Thin request/response wrapper around the v2 query API.

    Each call is a single GET whose body is handed to the decoder. There is no
    retry, caching or rate limiting here.
    """

    def __init__(
        self,
        app_id: str | None = None,
        formats: tuple[Format, ...] = (),
        image_width: int = 0,
        image_max_width: int = 0,
        image_magnification: float = 0,
        image_plot_width: int = 0,
        ip_address: str = "",
        lat_long: str = "",
        location: str = "",
        reinterpret: bool = False,
        units: UnitSystem = UnitSystem.LOCATION,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.app_id = settings.wolfram_app_id if app_id is None else app_id
        self.formats = tuple(formats)
        self.image_width = image_width
        self.image_max_width = image_max_width
        self.image_magnification = image_magnification
        self.image_plot_width = image_plot_width
        self.ip_address = ip_address
        self.lat_long = lat_long
        self.location = location
        self.reinterpret = reinterpret
        self.units = UnitSystem(units)
        self.base_url = (base_url or settings.wolfram_api_base).rstrip("/")
        self.timeout = settings.request_timeout if timeout is None else timeout

    def _get_app_id(self) -> str:
        if not self.app_id:
            raise AuthenticationError(
                "Wolfram Alpha AppID not configured. Get one at "
                "https://developer.wolframalpha.com/access and set WOLFRAM_APP_ID in .env"
            )
        return self.app_id

    def params(self, input_text: str) -> dict:
        """Query-string parameters for a request; unset options are left out."""
        params = {"appid": self._get_app_id(), "input": input_text}
        if self.formats:
            params["format"] = ",".join(Format(f).value for f in self.formats)
        if self.image_width:
            params["width"] = self.image_width
        if self.image_max_width:
            params["maxwidth"] = self.image_max_width
        if self.image_magnification:
            params["mag"] = self.image_magnification
        if self.image_plot_width:
            params["plotwidth"] = self.image_plot_width
        if self.ip_address:
            params["ip"] = self.ip_address
        if self.lat_long:
            params["latlong"] = self.lat_long
        if self.location:
            params["location"] = self.location
        if self.reinterpret:
            params["reinterpret"] = "true"
        if self.units is not UnitSystem.LOCATION:
            params["units"] = self.units.value
        return params

    def _get(self, path: str, input_text: str) -> Result:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s input=%r", url, input_text)
        try:
            resp = requests.get(url, params=self.params(input_text), timeout=self.timeout)
        except requests.RequestException as e:
            raise IntegrationError(f"Wolfram Alpha request failed: {e}") from e
        result = decode(_handle_response(resp))
        if result.error is not None and result.error.code in APP_ID_ERROR_CODES:
            raise AuthenticationError(f"Wolfram Alpha rejected the AppID: {result.error.message}")
        if result.errored:
            logger.info("Wolfram Alpha could not process %r: %s", input_text, result.error)
        return result

    def query(self, input_text: str) -> Result:
        """Full query: all pods in the requested formats."""
        return self._get("/v2/query", input_text)

    def validate(self, input_text: str) -> Result:
        """Parse-only query: reports whether the input is understood, without pods."""
        return self._get("/v2/validatequery", input_text)

    def ask(self, input_text: str) -> str:
        """Plaintext of the primary result for a query."""
        result = self.query(input_text)
        if not result.succeeded:
            raise NoPrimaryPod(f"Wolfram Alpha could not interpret the query: '{input_text}'")
        return result.primary_text()


def _handle_response(resp: requests.Response) -> bytes:
    if resp.status_code in (401, 403):
        raise AuthenticationError("Wolfram Alpha AppID is invalid. Check WOLFRAM_APP_ID in .env.")
    if resp.status_code == 429:
        raise RateLimitError("Wolfram Alpha rate limit exceeded.")
    if resp.status_code >= 400:
        raise IntegrationError(f"Wolfram Alpha API error ({resp.status_code}): {resp.text[:200]}")
    return resp.content


def query(input_text: str, units: UnitSystem = UnitSystem.LOCATION) -> Result:
    return Client(units=units).query(input_text)


def validate(input_text: str) -> Result:
    return Client().validate(input_text)


def ask(input_text: str, units: UnitSystem = UnitSystem.LOCATION) -> str:
    return Client(units=units).ask(input_text)
