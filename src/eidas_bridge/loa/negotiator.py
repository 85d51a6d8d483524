"""
LoA negotiator — translates between the national assurance URIs a relying
party asks for and the eIDAS assurance levels a foreign proxy service offers.

Three steps per authentication:

  1. calculate_requested_authn_context()  national request → eIDAS request
  2. assert_returned_authn_context_uri()  eIDAS response meets the request?
  3. calculate_return_authn_context_uri()  eIDAS response → national URI

All functions are pure and return Result; LoaNegotiator adds the country
metadata lookup in front of them.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from railway import ErrorCode, Failures
from railway.result import Result

from eidas_bridge.domain.models import Comparison, RequestedAuthnContext
from eidas_bridge.domain.ports import CountryMetadataProvider
from eidas_bridge.loa.catalog import (
    ALL_NATIONAL_LEVELS,
    ALL_NATIONAL_URIS,
    EIDAS_TEST_URI,
    AssuranceTier,
    EidasLevel,
    NationalLevel,
    declared_levels,
    eidas_level,
    eidas_uri_variants,
    national_level,
    supported_national_uris,
)

log = structlog.get_logger()


def _requested_levels(requested_uris: Sequence[str]) -> list[NationalLevel]:
    if not requested_uris:
        return list(ALL_NATIONAL_LEVELS)
    levels: list[NationalLevel] = []
    for uri in requested_uris:
        level = national_level(uri)
        if level is None:
            log.debug("loa.unknown_requested_uri", uri=uri)
        elif level not in levels:
            levels.append(level)
    return levels


def calculate_requested_authn_context(
    declared_uris: Sequence[str] | None,
    requested_uris: Sequence[str] | None,
) -> Result[RequestedAuthnContext]:
    """
    Build the eIDAS RequestedAuthnContext for a country.

    `declared_uris` are the eIDAS levels from the country's metadata,
    `requested_uris` the national URIs the relying party asked for (empty
    means any). If the country declares a non-notified level that meets the
    request, the context is EXACT over every declared level meeting it;
    otherwise it is MINIMUM over the lowest sufficient notified tier.

        calculate_requested_authn_context([EIDAS_LOA_HIGH], [LOA_EIDAS_SUBSTANTIAL])
        # → Success(RequestedAuthnContext(MINIMUM, (EIDAS_LOA_SUBSTANTIAL,)))
    """
    requested_uris = list(requested_uris or [])

    if EIDAS_TEST_URI in requested_uris:
        if set(requested_uris) != {EIDAS_TEST_URI}:
            return Failures.request_unsupported(
                f"Test LoA '{EIDAS_TEST_URI}' can not be combined with other URIs: {requested_uris}"
            )
        return Result.success(RequestedAuthnContext(Comparison.EXACT, (EIDAS_TEST_URI,)))

    requested = _requested_levels(requested_uris)
    if not requested:
        return Failures.request_unsupported(f"None of the requested URIs are known: {requested_uris}")

    declared = declared_levels(declared_uris or [])

    exact = [
        level
        for level in declared
        if any(level.authorizes(national) for national in requested if national.accepts_non_notified)
    ]
    if any(not level.notified for level in exact):
        context = RequestedAuthnContext(Comparison.EXACT, tuple(level.uri for level in exact))
        log.debug("loa.requested_context", comparison=context.comparison.value, uris=list(context.uris))
        return Result.success(context)

    sufficient = [
        national.tier
        for national in requested
        if any(level.notified and level.tier >= national.tier for level in declared)
    ]
    if not sufficient:
        return Failures.request_unsupported(
            f"Requested {requested_uris or 'any level'} can not be met by declared levels "
            f"{[level.uri for level in declared]}"
        )

    context = RequestedAuthnContext(Comparison.MINIMUM, (EidasLevel(min(sufficient), True).uri,))
    log.debug("loa.requested_context", comparison=context.comparison.value, uris=list(context.uris))
    return Result.success(context)


def calculate_return_authn_context_uri(
    returned_uri: str | None,
    requested_uris: Sequence[str] | None,
) -> Result[str]:
    """
    Map the eIDAS level asserted by the proxy service back to a national URI.

    Walks down from the returned tier and picks the first originally requested
    national URI it authorizes. A notified level prefers the notified-only
    national URI of each tier. The test LoA maps to itself only when it was
    requested.
    """
    if returned_uri == EIDAS_TEST_URI and EIDAS_TEST_URI in (requested_uris or []):
        return Result.success(EIDAS_TEST_URI)

    level = eidas_level(returned_uri)
    if level is None:
        return Failures.no_mapping(f"Unknown eIDAS LoA URI returned: {returned_uri}")

    candidates = set(requested_uris or ALL_NATIONAL_URIS)
    for tier in level.tier.and_below():
        for national in _national_variants(tier, level.notified):
            if national.uri in candidates:
                log.debug("loa.return_mapping", returned=returned_uri, national=national.uri)
                return Result.success(national.uri)

    return Failures.no_mapping(
        f"Returned LoA {returned_uri} does not match any requested URI {list(requested_uris or [])}"
    )


def _national_variants(tier: AssuranceTier, notified: bool) -> list[NationalLevel]:
    if notified:
        return [NationalLevel(tier, False), NationalLevel(tier, True)]
    return [NationalLevel(tier, True)]


def assert_returned_authn_context_uri(
    returned_uri: str | None,
    requested_context: RequestedAuthnContext,
) -> Result[str]:
    """
    Verify the returned eIDAS LoA against the context that was sent.

    EXACT accepts any requested URI (either spelling of a non-notified level).
    MINIMUM accepts any notified level at or above the requested tier.
    Returns the returned URI on success.
    """
    if not returned_uri:
        return Failures.assurance_insufficient("No LoA returned in assertion")

    if requested_context.comparison is Comparison.EXACT:
        accepted: set[str] = set()
        for uri in requested_context.uris:
            accepted |= eidas_uri_variants(uri)
        if returned_uri in accepted:
            return Result.success(returned_uri)
        return Failures.assurance_insufficient(
            f"Returned LoA {returned_uri} is not one of the requested {list(requested_context.uris)}"
        )

    requested = eidas_level(requested_context.uris[0]) if requested_context.uris else None
    if requested is None or not requested.notified:
        return Failures.assurance_insufficient(
            f"Minimum comparison requires a notified eIDAS LoA, requested {list(requested_context.uris)}"
        )

    returned = eidas_level(returned_uri)
    if returned is None or not returned.notified or returned.tier < requested.tier:
        return Failures.assurance_insufficient(
            f"Returned LoA {returned_uri} is below the requested minimum {requested.uri}"
        )
    return Result.success(returned_uri)


def can_authenticate(declared_uris: Sequence[str] | None, requested_uris: Sequence[str] | None) -> bool:
    """Whether a country with the declared levels can meet any of the requested national URIs."""
    if not requested_uris or EIDAS_TEST_URI in requested_uris:
        return True
    supported = set(supported_national_uris(declared_uris or []))
    return any(uri in supported for uri in requested_uris)


class LoaNegotiator:
    """
    Country-aware front of the negotiation functions.

    Looks up the declared assurance levels through the CountryMetadataProvider
    port; the metadata is never cached here.
    """

    def __init__(self, metadata_provider: CountryMetadataProvider) -> None:
        self._metadata_provider = metadata_provider

    def _declared(self, country_code: str) -> Result[tuple[str, ...]]:
        metadata = self._metadata_provider.get_country(country_code.upper())
        if metadata is None:
            return Result.failure(
                ErrorCode.COUNTRY_NOT_SUPPORTED,
                f"No metadata for country '{country_code}'",
            )
        return Result.success(metadata.assurance_levels)

    def requested_authn_context(
        self, country_code: str, requested_uris: Sequence[str] | None
    ) -> Result[RequestedAuthnContext]:
        return (
            self._declared(country_code)
            .flat_map(lambda declared: calculate_requested_authn_context(declared, requested_uris))
            .peek_failure(
                lambda err: log.info(
                    "loa.request_rejected", country=country_code, code=err.code.value, reason=err.message
                )
            )
        )

    def can_authenticate(self, country_code: str, requested_uris: Sequence[str] | None) -> bool:
        return self._declared(country_code).map(
            lambda declared: can_authenticate(declared, requested_uris)
        ).get_or_else(False)

    def supported_national_uris(self, country_code: str) -> list[str]:
        return self._declared(country_code).map(supported_national_uris).get_or_else([])
