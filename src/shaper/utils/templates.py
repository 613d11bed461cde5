"""Template rendering utilities."""

import logging
from typing import Any, Mapping

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError

from shaper.errors import TemplateRenderError


logger = logging.getLogger(__name__)


class StringTemplateLoader(BaseLoader):
    """Template loader for string templates."""
    
    def __init__(self, template_string: str):
        self.template_string = template_string
        
    def get_source(self, environment, template):
        return self.template_string, None, lambda: True


def render_template(template_str: str, context: Mapping[str, Any]) -> str:
    """Render a Jinja2 template string with the given variables.

    Undefined variables are errors, and a trailing newline is kept since
    iPXE scripts are line oriented.
    """
    try:
        env = Environment(
            loader=StringTemplateLoader(template_str),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        template = env.get_template("")
        return template.render(dict(context))
        
    except TemplateError as e:
        logger.error(f"Template rendering error: {e}")
        raise TemplateRenderError("templating ipxe profile") from e
