"""Tests for the lazy top-level API in nightframe/__init__.py."""

import pytest

import nightframe


class TestLazyImports:
    @pytest.mark.parametrize("name", nightframe.__all__)
    def test_every_public_name_resolves(self, name: str) -> None:
        assert getattr(nightframe, name) is not None

    def test_identity(self) -> None:
        from nightframe.app import App
        from nightframe.mocks.store import MockStore

        assert nightframe.App is App
        assert nightframe.MockStore is MockStore

    def test_unknown_name(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'Nope'"):
            nightframe.Nope  # noqa: B018
