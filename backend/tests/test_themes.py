# tests/test_themes.py
"""
Tests for component themes.

Tests cover:
- The default theme created with every institution
- Default promotion and the rules that protect the default
- Inheritance from the institution default
- CSS compilation, preview and contrast checks
- Config validation through the API
"""

import pytest

from themes.commands import create_theme, delete_theme, set_default_theme, update_theme
from themes.models import ComponentTheme
from themes.services import (
    DEFAULT_THEME_CONFIG,
    accessibility_issues,
    compile_css,
    contrast_ratio,
    deep_merge,
    merged_config,
)

from tests.conftest import make_actor


DARK = {
    "colors": {"primary": "#111111", "background": "#000000"},
    "typography": {"font_family": "Georgia, serif"},
    "spacing": {"base": "1.25rem"},
}


@pytest.fixture
def admin_actor(institution_admin, tenant):
    return make_actor(institution_admin, tenant)


# =============================================================================
# Commands
# =============================================================================

@pytest.mark.django_db
class TestThemeCommands:

    def test_institution_starts_with_default(self, tenant):
        theme = ComponentTheme.objects.get(tenant=tenant)
        assert theme.slug == "default"
        assert theme.is_default is True
        assert theme.config == DEFAULT_THEME_CONFIG

    def test_create_theme_slugifies_name(self, admin_actor, tenant):
        result = create_theme(admin_actor, name="Dark Mode", config=DARK)
        assert result.success, result.error
        theme = result.data["theme"]
        assert theme.slug == "dark-mode"
        assert theme.is_default is False

    def test_duplicate_slug_rejected(self, admin_actor):
        assert create_theme(admin_actor, name="Dark", config=DARK).success
        assert create_theme(admin_actor, name="Dark", config=DARK).success is False

    def test_only_one_default(self, admin_actor, tenant):
        dark = create_theme(admin_actor, name="Dark", config=DARK, is_default=True).data["theme"]
        defaults = ComponentTheme.objects.filter(tenant=tenant, is_default=True)
        assert list(defaults) == [dark]

    def test_default_cannot_be_demoted_or_deleted(self, admin_actor, tenant):
        default = ComponentTheme.objects.get(tenant=tenant, is_default=True)
        assert update_theme(admin_actor, default, is_default=False).success is False
        assert delete_theme(admin_actor, default).success is False

    def test_promote_then_delete_old_default(self, admin_actor, tenant):
        old = ComponentTheme.objects.get(tenant=tenant, is_default=True)
        dark = create_theme(admin_actor, name="Dark", config=DARK).data["theme"]
        assert set_default_theme(admin_actor, dark).success
        old.refresh_from_db()
        assert old.is_default is False
        assert delete_theme(admin_actor, old).success

    def test_graduate_cannot_manage_themes(self, graduate_user, tenant):
        from rest_framework.exceptions import PermissionDenied

        with pytest.raises(PermissionDenied):
            create_theme(make_actor(graduate_user, tenant), name="Mine", config=DARK)


# =============================================================================
# Inheritance and rendering
# =============================================================================

@pytest.mark.django_db
class TestThemeRendering:

    def test_deep_merge_child_wins(self):
        merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}

    def test_theme_inherits_from_default(self, admin_actor):
        dark = create_theme(admin_actor, name="Dark", config=DARK).data["theme"]
        config = merged_config(dark)
        assert config["colors"]["primary"] == "#111111"
        assert config["colors"]["accent"] == DEFAULT_THEME_CONFIG["colors"]["accent"]
        assert config["borders"]["radius"] == "8px"

    def test_css_variables(self, tenant):
        css = compile_css(ComponentTheme.objects.get(tenant=tenant))
        assert "--color-primary: #007bff;" in css
        assert "--font-size-base: 16px;" in css
        assert "--spacing-section-padding: 1.5rem;" in css
        assert "@media (max-width: 768px)" in css
        assert ".component-button" in css

    def test_minified_css(self, tenant):
        css = compile_css(ComponentTheme.objects.get(tenant=tenant), minify=True)
        assert "\n" not in css
        assert "/*" not in css
        assert "--color-primary:#007bff" in css

    def test_contrast_ratio(self):
        assert round(contrast_ratio("#000000", "#ffffff"), 1) == 21.0
        assert contrast_ratio("#fff", "#ffffff") == 1.0

    def test_accessibility_flags_low_contrast(self):
        issues = accessibility_issues({"colors": {"primary": "#111111", "text": "#ffffff", "background": "#000000"}})
        assert [i["pair"] for i in issues] == ["primary/background"]

    def test_default_theme_text_passes(self):
        issues = accessibility_issues(DEFAULT_THEME_CONFIG)
        assert "text/background" not in [i["pair"] for i in issues]


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestThemeAPI:

    def test_create_and_fetch(self, client_for, institution_admin, tenant):
        client = client_for(institution_admin, tenant)
        response = client.post("/api/themes/", {"name": "Dark", "config": DARK}, format="json")
        assert response.status_code == 201

        detail = client.get(f"/api/themes/{response.json()['id']}/").json()
        assert detail["merged_config"]["colors"]["secondary"] == "#6c757d"
        assert [link["slug"] for link in detail["inheritance_chain"]] == ["dark", "default"]

    def test_invalid_color_rejected(self, client_for, institution_admin, tenant):
        config = {**DARK, "colors": {"primary": "blue"}}
        response = client_for(institution_admin, tenant).post(
            "/api/themes/", {"name": "Bad", "config": config}, format="json"
        )
        assert response.status_code == 400

    def test_invalid_font_size_rejected(self, client_for, institution_admin, tenant):
        config = {**DARK, "typography": {"font_family": "Arial", "font_sizes": {"small": "tiny"}}}
        response = client_for(institution_admin, tenant).post(
            "/api/themes/", {"name": "Bad", "config": config}, format="json"
        )
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "override",
        [
            {"colors": {"primary": "#111111", "evil": "red;}</style><script>alert(1)</script>"}},
            {"colors": {"primary": "#111111", "x;}</style>": "#ffffff"}},
            {"typography": {"font_family": "Arial</style><script>alert(2)</script>"}},
            {"typography": {"font_family": "Arial", "heading_font": "Georgia; } body {"}},
            {"spacing": {"base": "1rem", "gutter": "calc(1rem);}"}},
        ],
    )
    def test_markup_in_config_rejected(self, client_for, institution_admin, tenant, override):
        response = client_for(institution_admin, tenant).post(
            "/api/themes/", {"name": "Bad", "config": {**DARK, **override}}, format="json"
        )
        assert response.status_code == 400
        assert not ComponentTheme.objects.filter(tenant=tenant, slug="bad").exists()

    def test_only_validated_config_is_stored(self, client_for, institution_admin, tenant):
        config = {
            **DARK,
            "colors": {"primary": "#111111", "surface": "#222222"},
            "borders": {"radius": "4px", "outline": "</style>"},
        }
        client = client_for(institution_admin, tenant)
        response = client.post("/api/themes/", {"name": "Dark", "config": config}, format="json")
        assert response.status_code == 201

        theme = ComponentTheme.objects.get(pk=response.json()["id"])
        assert theme.config["colors"] == {"primary": "#111111", "surface": "#222222"}
        assert theme.config["borders"] == {"radius": "4px"}

        preview = client.get(f"/api/themes/{theme.id}/preview/")
        assert preview.status_code == 200
        html = preview.content.decode()
        assert "--color-surface: #222222;" in html
        assert html.count("</style>") == 1

    def test_css_endpoint(self, client_for, graduate_user, tenant):
        theme = ComponentTheme.objects.get(tenant=tenant)
        response = client_for(graduate_user, tenant).get(f"/api/themes/{theme.id}/css/")
        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/css")

    def test_accessibility_endpoint(self, client_for, institution_admin, tenant):
        client = client_for(institution_admin, tenant)
        theme_id = client.post("/api/themes/", {"name": "Dark", "config": DARK}, format="json").json()["id"]
        body = client.get(f"/api/themes/{theme_id}/accessibility/").json()
        assert body["passes"] is False

    def test_other_institution_theme_is_hidden(self, client_for, institution_admin, tenant, second_tenant):
        foreign = ComponentTheme.objects.get(tenant=second_tenant)
        response = client_for(institution_admin, tenant).get(f"/api/themes/{foreign.id}/")
        assert response.status_code == 404
