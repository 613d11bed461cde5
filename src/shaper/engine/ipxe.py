"""Profile selection and iPXE rendering engine."""

import logging
import threading
from typing import Dict, Optional

from shaper.engine.mux import BatchMode, ResolveTransformMux
from shaper.errors import NotFoundError, ProfileSelectionError, ShaperError
from shaper.models.selectors import IPXESelectors
from shaper.utils.logging import format_event
from shaper.utils.templates import render_template


logger = logging.getLogger(__name__)


# Firmware chains back to the selection endpoint with these settings; the
# value is the iPXE setting type, None for the raw value.
BOOTSTRAP_PARAMS = (
    ("uuid", None),
    ("buildarch", "uristring"),
)

IPXE_BOOTSTRAP_FORMAT = "#!ipxe\nchain ipxe?{params}\n"

ERROR_CONTEXT = "finding and rendering ipxe profile"


def _to_text(data: Dict[str, bytes]) -> Dict[str, str]:
    # surrogateescape keeps non UTF-8 bytes intact through rendering
    return {name: value.decode("utf-8", "surrogateescape") for name, value in data.items()}


class IPXEEngine:
    """Selects the profile of a machine and renders its iPXE script."""

    def __init__(self, catalog, mux: ResolveTransformMux):
        """Initialize the engine."""
        self.catalog = catalog
        self.mux = mux
        self._bootstrap_lock = threading.Lock()
        self._cached_bootstrap: Optional[bytearray] = None

    async def find_profile_and_render(self, selectors: IPXESelectors) -> bytes:
        """Find the profile assigned to the machine and render its template.

        An exact uuid/buildarch assignment wins; only when none exists is
        the architecture default used. Exposed content is rendered as its
        reference URL. Every item is available to the template by name and
        through the ``content`` mapping, which also reaches names that are
        not identifiers such as ``{{ content["cloud-init"] }}``. An item
        named ``content`` shadows the mapping.
        """
        try:
            assignment = await self.catalog.find_assignment_by_selectors(selectors)
            matched_by = "uuid"
        except NotFoundError:
            try:
                assignment = await self.catalog.find_default_assignment(selectors.buildarch)
            except ShaperError as e:
                raise ProfileSelectionError(
                    f"cannot select assignment with selectors: "
                    f"uuid={str(selectors.uuid)!r} & buildarch={selectors.buildarch!r}"
                ).with_context("fallback to default assignment").with_context(ERROR_CONTEXT) from e
            matched_by = "default"
        except ShaperError as e:
            raise e.with_context("selecting assignment").with_context(ERROR_CONTEXT)

        logger.info(format_event(
            "assignment_selected",
            assignment_name=assignment.name,
            assignment_namespace=assignment.namespace,
            subject_selectors=assignment.subject_selectors.as_dict(),
            matched_by=matched_by,
            uuid=str(selectors.uuid),
            buildarch=selectors.buildarch,
        ))

        try:
            profile = await self.catalog.get_profile(assignment.profile_name)
        except ShaperError as e:
            raise e.with_context(f"getting profile {assignment.profile_name!r}").with_context(ERROR_CONTEXT)

        logger.info(format_event(
            "profile_matched",
            profile_name=profile.name,
            profile_namespace=profile.namespace,
            assignment=assignment.name,
        ))

        try:
            data = await self.mux.resolve_and_transform_batch(
                profile.additional_content,
                selectors,
                BatchMode.RETURN_EXPOSED_URL,
            )
            text = _to_text(data)
            rendered = render_template(profile.ipxe_template, {"content": text, **text})
        except ShaperError as e:
            raise e.with_context(f"profile {profile.name!r}").with_context(ERROR_CONTEXT)

        return rendered.encode("utf-8", "surrogateescape")

    def bootstrap(self) -> bytes:
        """Return the iPXE bootstrap script.

        The script is computed once; every call returns a new bytes object
        built from the cached buffer.
        """
        if self._cached_bootstrap is None:
            with self._bootstrap_lock:
                if self._cached_bootstrap is None:
                    self._cached_bootstrap = bytearray(self._render_bootstrap())
        return bytes(self._cached_bootstrap)

    @staticmethod
    def _render_bootstrap() -> bytes:
        params = []
        for param, param_type in BOOTSTRAP_PARAMS:
            if param_type is None:
                params.append(f"{param}=${{{param}}}")
            else:
                params.append(f"{param}=${{{param}:{param_type}}}")
        return IPXE_BOOTSTRAP_FORMAT.format(params="&".join(params)).encode()
