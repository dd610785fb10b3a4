from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape
import logging
import os

from exceptions import ValidationError

logger = logging.getLogger(__name__)

FIELDS_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASE_FIELD_DIR = os.path.join(FIELDS_DIR, "base_field")


class BaseField:
    """
    Base class for host custom fields.

    The host calls the lifecycle methods in this order:
    validate() and on_save() when an editor submits the field, format()
    whenever the stored value is read for output, and render() when the
    edit form is displayed.
    """

    def __init__(self, config):
        self.config = config
        self.name = config.get("name")
        self.label = config.get("label", self.name)

        field_dir = self.get_field_dir()
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(field_dir), FileSystemLoader(BASE_FIELD_DIR)]),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def get_field_id(self):
        return self.config.get("id")

    def get_field_dir(self, path=None):
        field_dir = os.path.join(FIELDS_DIR, self.get_field_id())
        if path:
            return os.path.join(field_dir, path)
        return field_dir

    def validate(self, value):
        """Return an error message for the editor, or None when the value is acceptable."""
        return None

    def format(self, value):
        return value

    def on_save(self, value):
        return value

    def render(self, value):
        raise NotImplementedError("render must be implemented by subclasses")

    def render_template(self, template_name, template_params):
        template = self.env.get_template(template_name)
        return template.render(field=self, **template_params)

    def clean(self, value):
        """Raise ValidationError when validate() reports a problem with value."""
        message = self.validate(value)
        if message:
            raise ValidationError(message, getattr(value, "url", ""))
