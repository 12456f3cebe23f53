"""Tests for extragrid.cascade module."""

from extragrid.cascade import effective_style, export_overrides, layered_style
from extragrid.model import GridModel


class TestLayeredStyle:
    """Tests for plain layer merging."""

    def test_later_layers_win(self) -> None:
        assert layered_style({"color": "red"}, None, {"color": "blue"}) == {"color": "blue"}

    def test_empty_values_do_not_override(self) -> None:
        assert layered_style({"color": "red"}, {"color": ""}) == {"color": "red"}


class TestEffectiveStyle:
    """Tests for cascade resolution."""

    def test_default_only(self) -> None:
        model = GridModel(2, 2)
        model.set_default_style({"fontFamily": "Arial"})
        assert effective_style(model, 1, 1) == {"fontFamily": "Arial"}

    def test_cascade_order(self) -> None:
        model = GridModel(2, 2)
        model.set_default_style({"color": "black", "fontFamily": "Arial"})
        model.set_column_style(0, {"color": "gray"}, propagate=False)
        model.set_row_style(0, {"color": "red"}, propagate=False)
        model.set_cell_style(0, 0, {"fontWeight": "bold"})
        assert effective_style(model, 0, 0) == {
            "color": "red",
            "fontFamily": "Arial",
            "fontWeight": "bold",
        }
        assert effective_style(model, 1, 0) == {"color": "gray", "fontFamily": "Arial"}
        assert effective_style(model, 1, 1) == {"color": "black", "fontFamily": "Arial"}

    def test_no_layers(self) -> None:
        assert effective_style(GridModel(2, 2), 0, 0) is None

    def test_out_of_range(self) -> None:
        model = GridModel(2, 2)
        model.set_default_style({"color": "red"})
        assert effective_style(model, 2, 0) is None
        assert effective_style(model, 0, -1) is None


class TestExportOverrides:
    """Tests for default-diffed overrides."""

    def test_values_equal_to_default_are_dropped(self) -> None:
        model = GridModel(2, 2)
        model.set_default_style({"fontFamily": "Arial", "color": "black"})
        model.set_cell_style(0, 0, {"fontFamily": "Arial", "color": "red"})
        assert export_overrides(model, 0, 0) == {"color": "red"}

    def test_unstyled_cell(self) -> None:
        model = GridModel(2, 2)
        model.set_default_style({"fontFamily": "Arial"})
        assert export_overrides(model, 1, 1) == {}
