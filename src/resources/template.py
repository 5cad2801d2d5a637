"""Template management for the samples operator."""

import copy

from models import TemplateDefinition
from resources.apply import create_or_update
from stores import TemplateStore


def ensure_template(store: TemplateStore, template: TemplateDefinition) -> str:
    """Create or update a template."""
    return create_or_update(store, "template", dict(copy.deepcopy(template)))
