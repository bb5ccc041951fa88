"""Tests for deriving the structure from a grid."""

from datetime import datetime

import pytest

from payrollmap.structure import EmptyInputError, StructureColumn, load_structure


class TestLoadStructure:
    """Test load_structure."""

    def test_headers_become_main_headers(self):
        """Test that row 0 supplies one main header per column."""
        structure = load_structure([["Name", "Salary"]])

        assert [c.main_header for c in structure] == ["Name", "Salary"]
        assert all(c.aliases == [] for c in structure)

    def test_aliases_follow_row_order(self):
        """Test that aliases are collected top to bottom."""
        grid = [
            ["Name", "Salary"],
            ["Full Name", "Pay"],
            ["Employee", None],
            ["Staff", "Gross Pay"],
        ]
        structure = load_structure(grid)

        assert structure[0].aliases == ["Full Name", "Employee", "Staff"]
        assert structure[1].aliases == ["Pay", "Gross Pay"]

    def test_aliases_are_trimmed(self):
        """Test that alias cells are stored trimmed."""
        structure = load_structure([["Name"], ["  Full Name  "]])
        assert structure[0].aliases == ["Full Name"]

    def test_blank_and_non_string_cells_skipped(self):
        """Test that blank, whitespace-only and non-string cells are not aliases."""
        grid = [
            ["Name"],
            [""],
            ["   "],
            [42],
            [datetime(2024, 1, 1)],
            [None],
            ["Employee"],
        ]
        structure = load_structure(grid)
        assert structure[0].aliases == ["Employee"]

    def test_blank_header_synthesized(self):
        """Test that blank header cells get a 1-based Column_<n> name."""
        structure = load_structure([["Name", None, "", "Salary"]])

        assert [c.main_header for c in structure] == [
            "Name",
            "Column_2",
            "Column_3",
            "Salary",
        ]

    def test_non_string_header_rendered_as_text(self):
        """Test that numeric header cells become strings."""
        structure = load_structure([[2024, "Name"]])
        assert structure[0].main_header == "2024"

    def test_ragged_rows(self):
        """Test that short data rows do not break alias collection."""
        grid = [["Name", "Salary", "Dept"], ["Full Name"], [None, None, "Department"]]
        structure = load_structure(grid)

        assert structure[0].aliases == ["Full Name"]
        assert structure[1].aliases == []
        assert structure[2].aliases == ["Department"]

    def test_cells_beyond_header_ignored(self):
        """Test that data cells past the header width belong to no column."""
        structure = load_structure([["Name"], ["Full Name", "Orphan"]])

        assert len(structure) == 1
        assert structure[0].aliases == ["Full Name"]

    def test_duplicate_main_headers_tolerated(self):
        """Test that duplicate main headers are kept on load."""
        structure = load_structure([["Name", "Name"], ["A", "B"]])

        assert structure == [
            StructureColumn(main_header="Name", aliases=["A"]),
            StructureColumn(main_header="Name", aliases=["B"]),
        ]

    def test_empty_grid_raises(self):
        """Test that a grid with no rows is rejected."""
        with pytest.raises(EmptyInputError):
            load_structure([])

    def test_header_only_grid_with_no_cells(self):
        """Test that an empty header row yields an empty structure."""
        assert load_structure([[]]) == []
