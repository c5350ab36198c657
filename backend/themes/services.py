"""
Theme rendering, inheritance and accessibility checks.

A non-default theme inherits from its tenant's default theme: the merged
config is a deep merge of the default with the theme's own config, the
theme's values winning.
"""
import copy
import logging
import re

from django.utils.html import escape

from themes.models import ComponentTheme

logger = logging.getLogger(__name__)

DEFAULT_THEME_CONFIG = {
    "colors": {
        "primary": "#007bff",
        "secondary": "#6c757d",
        "accent": "#28a745",
        "background": "#ffffff",
        "text": "#333333",
    },
    "typography": {
        "font_family": "Inter, Arial, sans-serif",
        "heading_font": "Inter, Arial, sans-serif",
        "font_sizes": {"base": "16px", "heading": "2rem"},
        "line_height": 1.6,
    },
    "spacing": {
        "base": "1rem",
        "small": "0.5rem",
        "large": "2rem",
        "section_padding": "1.5rem",
    },
    "borders": {"radius": "8px", "width": "1px"},
    "animations": {"duration": "0.3s", "easing": "ease-in-out"},
}

MIN_TEXT_CONTRAST = 4.5


def create_default_theme(tenant) -> ComponentTheme:
    theme, created = ComponentTheme.objects.get_or_create(
        tenant=tenant,
        slug="default",
        defaults={
            "name": "Default",
            "config": copy.deepcopy(DEFAULT_THEME_CONFIG),
            "is_default": not ComponentTheme.objects.filter(tenant=tenant, is_default=True).exists(),
        },
    )
    if created:
        logger.info(f"Default theme created for tenant {tenant.slug}")
    return theme


# =============================================================================
# Inheritance
# =============================================================================

def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge `override` into a copy of `base`; override wins."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def inheritance_chain(theme: ComponentTheme) -> list:
    """Themes from most specific to most general."""
    chain = [theme]
    parent = theme.parent()
    if parent is not None:
        chain.append(parent)
    return chain


def merged_config(theme: ComponentTheme) -> dict:
    config = {}
    for link in reversed(inheritance_chain(theme)):
        config = deep_merge(config, link.config)
    return config


# =============================================================================
# Rendering
# =============================================================================

def _css_name(key: str) -> str:
    return key.replace("_", "-")


def css_variables(config: dict) -> str:
    lines = [":root {"]

    for name, value in config.get("colors", {}).items():
        lines.append(f"  --color-{_css_name(name)}: {value};")

    typography = config.get("typography", {})
    if typography.get("font_family"):
        lines.append(f"  --font-family: {typography['font_family']};")
    if typography.get("heading_font"):
        lines.append(f"  --font-heading: {typography['heading_font']};")
    for size, value in typography.get("font_sizes", {}).items():
        lines.append(f"  --font-size-{_css_name(size)}: {value};")
    if typography.get("line_height") is not None:
        lines.append(f"  --line-height: {typography['line_height']};")

    for prefix, section in (("spacing", "spacing"), ("border", "borders"), ("animation", "animations")):
        for name, value in config.get(section, {}).items():
            lines.append(f"  --{prefix}-{_css_name(name)}: {value};")

    lines.append("}")
    return "\n".join(lines) + "\n"


COMPONENT_CSS = """
/* Components */
.component-hero {
  background-color: var(--color-primary);
  color: var(--color-background);
  padding: calc(var(--spacing-base) * 3) var(--spacing-base);
}
.component-button {
  background-color: var(--color-primary);
  color: var(--color-background);
  padding: var(--spacing-small) var(--spacing-base);
  border: none;
  border-radius: var(--border-radius);
  font-family: var(--font-family);
  cursor: pointer;
  transition: all var(--animation-duration) var(--animation-easing);
}
.component-button:hover {
  background-color: var(--color-secondary);
}
.component-card {
  background-color: var(--color-background);
  color: var(--color-text);
  border: var(--border-width) solid var(--color-secondary);
  border-radius: var(--border-radius);
  padding: var(--spacing-section-padding);
}
"""


def _responsive_css(config: dict) -> str:
    rules = []
    base_spacing = config.get("spacing", {}).get("base")
    if base_spacing:
        rules.append(f"    --spacing-base: calc({base_spacing} * 0.8);")
    base_font = config.get("typography", {}).get("font_sizes", {}).get("base")
    if base_font:
        rules.append(f"    --font-size-base: calc({base_font} * 0.9);")
    if not rules:
        return ""
    return "\n@media (max-width: 768px) {\n  :root {\n" + "\n".join(rules) + "\n  }\n}\n"


def _minify(css: str) -> str:
    css = re.sub(r"/\*.*?\*/", "", css, flags=re.S)
    css = re.sub(r"\s+", " ", css)
    css = re.sub(r"\s*([{}:;,])\s*", r"\1", css)
    return css.replace(";}", "}").strip()


def compile_css(theme: ComponentTheme, minify: bool = False) -> str:
    """Variables, responsive overrides and base component rules."""
    config = merged_config(theme)
    css = css_variables(config) + _responsive_css(config) + COMPONENT_CSS
    return _minify(css) if minify else css


def preview_html(theme: ComponentTheme) -> str:
    css = compile_css(theme)
    name = escape(theme.name)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f"<title>{name} preview</title>\n"
        f"<style>\n{css}\n"
        "body { font-family: var(--font-family); line-height: var(--line-height);"
        " background-color: var(--color-background); color: var(--color-text);"
        " margin: var(--spacing-base); }\n"
        "h1, h2, h3 { font-family: var(--font-heading, var(--font-family)); }\n"
        "</style>\n</head>\n<body>\n"
        f'<div class="component-hero"><h1>{name}</h1><p>Sample hero content</p></div>\n'
        '<div class="component-card"><h3>Card Title</h3><p>Card content goes here</p></div>\n'
        '<button class="component-button">Sample Button</button>\n'
        "</body>\n</html>\n"
    )


# =============================================================================
# Accessibility
# =============================================================================

def hex_to_rgb(value: str) -> tuple:
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


def relative_luminance(value: str) -> float:
    def channel(c):
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in hex_to_rgb(value))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1: str, color2: str) -> float:
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def accessibility_issues(config: dict) -> list:
    """Color pairs below the WCAG AA contrast ratio for normal text."""
    colors = config.get("colors", {})
    background = colors.get("background")
    if not background:
        return []

    issues = []
    for role in ("primary", "text"):
        color = colors.get(role)
        if not color:
            continue
        ratio = contrast_ratio(color, background)
        if ratio < MIN_TEXT_CONTRAST:
            issues.append({
                "pair": f"{role}/background",
                "foreground": color,
                "background": background,
                "ratio": round(ratio, 2),
                "message": f"{role.title()} color contrast ratio {ratio:.2f}:1 is below {MIN_TEXT_CONTRAST}:1 (WCAG AA)",
            })
    return issues
