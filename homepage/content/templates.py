"""
Template registry for the homepage service.

Every page template in the templates directory extends the shared base
layout (base.html), so rendering a page always runs through the base
layout's blocks. Templates are compiled once at startup.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, nodes, select_autoescape

from ..domain.ports import ConfigError, TemplateNotFoundError
from ..domain.schema import ViewData


logger = logging.getLogger(__name__)

TEMPLATE_EXT = ".html"
BASE_TEMPLATE = "base"


class TemplateSet:
    """
    Immutable mapping from template identifier to compiled template.
    Identifiers are file names without the extension.
    """

    def __init__(self, templates: Dict[str, Template]):
        self._templates = dict(templates)

    @classmethod
    def build(cls, root: Union[str, Path]) -> "TemplateSet":
        """
        Compile all page templates found directly inside root.

        Args:
            root: Templates directory, scanned non-recursively

        Returns:
            Compiled template set

        Raises:
            ConfigError: If the base layout is missing, a template fails to
                compile, or a page template does not extend the base layout
        """
        root = Path(root)
        base_name = BASE_TEMPLATE + TEMPLATE_EXT

        try:
            files = sorted(
                p for p in root.iterdir()
                if p.is_file() and p.suffix == TEMPLATE_EXT
            )
        except OSError as e:
            raise ConfigError(f"Failed to read templates directory {root}: {e}") from e

        if not any(p.name == base_name for p in files):
            raise ConfigError(f"Missing base template, expected to find {base_name}")

        env = Environment(
            loader=FileSystemLoader(str(root)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        templates: Dict[str, Template] = {}
        try:
            env.get_template(base_name)
            for path in files:
                if path.name == base_name:
                    continue
                source = path.read_text(encoding="utf-8")
                if not _extends(env.parse(source, name=path.name), base_name):
                    raise ConfigError(f"Template {path.name} must extend {base_name}")
                templates[path.stem] = env.get_template(path.name)
        except TemplateError as e:
            raise ConfigError(f"Failed to compile templates in {root}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read template: {e}") from e

        logger.info(
            f"Compiled {len(templates)} templates",
            extra={"component": "templates", "root": str(root), "templates": sorted(templates)}
        )
        return cls(templates)

    @property
    def ids(self) -> List[str]:
        return sorted(self._templates)

    def has(self, template_id: str) -> bool:
        return template_id in self._templates

    def render(self, template_id: str, data: ViewData) -> bytes:
        """
        Render a page through the base layout.

        Args:
            template_id: Template identifier
            data: View data; its fields become the template variables

        Returns:
            UTF-8 encoded HTML

        Raises:
            TemplateNotFoundError: If template_id is not registered
        """
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Missing template {template_id}")

        context = {name: getattr(data, name) for name in type(data).model_fields}
        return template.render(**context).encode("utf-8")


def _extends(tree: nodes.Template, base_name: str) -> bool:
    for node in tree.find_all(nodes.Extends):
        if isinstance(node.template, nodes.Const) and node.template.value == base_name:
            return True
    return False
