from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import RegexValidator
from rest_framework import serializers

from themes.models import ComponentTheme

HEX_COLOR = RegexValidator(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$", "Use a hex color like #RGB or #RRGGBB.")
SIZE = RegexValidator(r"^\d+(\.\d+)?(px|rem|em)$", "Use a size in px, rem or em.")
PIXELS = RegexValidator(r"^\d+(\.\d+)?px$", "Use a size in px.")
SECONDS = RegexValidator(r"^\d+(\.\d+)?s$", "Use a duration in seconds, e.g. 0.3s.")
TOKEN_NAME = RegexValidator(r"^[A-Za-z][A-Za-z0-9_-]{0,49}$", "Names may only use letters, digits, '-' and '_'.")
FONT_STACK = RegexValidator(
    r"^[\w ,.'\"-]+$",
    "Font stacks may only use letters, digits, spaces, quotes, commas, dots and hyphens.",
)

EASINGS = ("ease", "ease-in", "ease-out", "ease-in-out", "linear")


def _color(required=False):
    return serializers.CharField(required=required, validators=[HEX_COLOR])


def _size(required=False):
    return serializers.CharField(required=required, validators=[SIZE])


class NamedTokensMixin:
    """Accepts extra named tokens whose values pass `token_validator`."""

    token_validator = None

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        errors = {}
        for key, value in data.items():
            if key in self.fields:
                continue
            try:
                TOKEN_NAME(str(key))
                if not isinstance(value, str):
                    raise DjangoValidationError("Expected a string value.")
                self.token_validator(value)
            except DjangoValidationError as e:
                errors[key] = e.messages
            else:
                values[key] = value
        if errors:
            raise serializers.ValidationError(errors)
        return values


class ColorsSerializer(NamedTokensMixin, serializers.Serializer):
    token_validator = HEX_COLOR

    primary = _color(required=True)
    secondary = _color()
    accent = _color()
    background = _color()
    text = _color()


class FontSizesSerializer(NamedTokensMixin, serializers.Serializer):
    token_validator = SIZE

    base = _size()
    heading = _size()


class TypographySerializer(serializers.Serializer):
    font_family = serializers.CharField(max_length=100, validators=[FONT_STACK])
    heading_font = serializers.CharField(required=False, max_length=100, validators=[FONT_STACK])
    font_sizes = FontSizesSerializer(required=False)
    line_height = serializers.FloatField(required=False, min_value=1, max_value=3)


class SpacingSerializer(NamedTokensMixin, serializers.Serializer):
    token_validator = SIZE

    base = _size(required=True)
    small = _size()
    large = _size()
    section_padding = _size()


class BordersSerializer(serializers.Serializer):
    radius = _size()
    width = serializers.CharField(required=False, validators=[PIXELS])


class AnimationsSerializer(serializers.Serializer):
    duration = serializers.CharField(required=False, validators=[SECONDS])
    easing = serializers.ChoiceField(required=False, choices=EASINGS)


class ThemeConfigSerializer(serializers.Serializer):
    colors = ColorsSerializer()
    typography = TypographySerializer()
    spacing = SpacingSerializer()
    borders = BordersSerializer(required=False)
    shadows = serializers.DictField(child=serializers.CharField(max_length=200), required=False)
    animations = AnimationsSerializer(required=False)


class ComponentThemeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComponentTheme
        fields = ("id", "name", "slug", "config", "is_default", "created_at", "updated_at")
        read_only_fields = fields


class ComponentThemeWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    slug = serializers.SlugField(max_length=100, required=False)
    config = serializers.JSONField()
    is_default = serializers.BooleanField(required=False, default=False)

    def validate_config(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Theme config must be an object.")
        config = ThemeConfigSerializer(data=value)
        config.is_valid(raise_exception=True)
        return config.validated_data


class ComponentThemeUpdateSerializer(ComponentThemeWriteSerializer):
    name = serializers.CharField(max_length=100, required=False)
    config = serializers.JSONField(required=False)
    is_default = serializers.BooleanField(required=False)
