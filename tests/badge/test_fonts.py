from __future__ import annotations

from pathlib import Path

import pytest

from hits.badge.fonts import (
    DESIGN_SIZES,
    FONT_CANDIDATES,
    FontConfigError,
    Typeface,
    TypefaceRegistry,
    load_typefaces,
    measure,
)
from hits.core.config import Settings


def _settings(font_paths: dict[str, str]) -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env="test",
        log_level="info",
        log_json=False,
        host="127.0.0.1",
        port=3030,
        database_url=None,
        redis_url=None,
        font_paths=font_paths,
    )


def test_canonical_typefaces_always_load() -> None:
    registry = load_typefaces()
    assert list(registry) == list(FONT_CANDIDATES)
    for typeface in registry.values():
        assert set(typeface.fonts) == set(DESIGN_SIZES)


def test_configured_font_that_cannot_load_is_fatal(tmp_path: Path) -> None:
    missing = tmp_path / "nope.ttf"
    with pytest.raises(FontConfigError, match="verdana"):
        load_typefaces(_settings({"verdana": str(missing)}))


def test_configured_garbage_font_is_fatal(tmp_path: Path) -> None:
    garbage = tmp_path / "garbage.ttf"
    garbage.write_bytes(b"definitely not a font")
    with pytest.raises(FontConfigError):
        load_typefaces(_settings({"mono": str(garbage)}))


def test_empty_registry_is_rejected() -> None:
    with pytest.raises(FontConfigError):
        TypefaceRegistry([])


def test_registry_is_read_only() -> None:
    registry = load_typefaces()
    with pytest.raises(TypeError):
        registry["x"] = registry.first()  # type: ignore[index]


def test_measure_empty_text_is_zero() -> None:
    assert measure("", load_typefaces().first()) == 0.0


def test_measure_is_additive_per_character() -> None:
    verdana = load_typefaces()["verdana"]
    assert measure("ab", verdana) == pytest.approx(measure("a", verdana) + measure("b", verdana))


def test_measure_scales_unloaded_sizes_linearly() -> None:
    verdana = load_typefaces()["verdana"]
    only_base = Typeface(name="v", source=verdana.source, fonts={11.0: verdana.fonts[11.0]})
    assert measure("Hits", only_base, 22.0) == pytest.approx(2 * measure("Hits", only_base, 11.0))
