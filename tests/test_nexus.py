"""
tests/test_nexus.py
===================
Pytest test suite for the NEXUS file driver.

Test data
---------
Three files in tests/trees/:

  nexus_t1_n10.trees
      TAXA block declaring Taxon_1 … Taxon_10, one TREES block with one
      tree using the taxon names directly.

  nexus_t11_n20_translate.trees
      No TAXA block; one TREES block with a 20-entry TRANSLATE table
      (1 → Taxon_1 … 20 → Taxon_20) and 11 trees written with the keys.

  nexus_t3_n10_comments.trees
      Comments everywhere (nested, holding ';' or 'END;'), a skipped
      ASSUMPTIONS block with a quoted ';', a lower-case TREES block with
      comments inside the tree descriptions, and a trailing NOTES block
      closed by ENDBLOCK.
"""

import logging
import os
import sys

import pytest

_HERE = os.path.dirname(__file__)
_TREES_DIR = os.path.join(_HERE, "trees")

sys.path.insert(0, os.path.dirname(_HERE))

from nexwood import parse_nexus, parse_nexus_file, quiet
from nexwood._errors import ErrorKind, ParsingError


def tree_path(filename: str) -> str:
    return os.path.join(_TREES_DIR, filename)


def leaf_label_set(tree) -> set:
    return {v.label_index for v in tree.leaves()}


def expect_error(text: str, kind: ErrorKind) -> ParsingError:
    with pytest.raises(ParsingError) as info:
        parse_nexus(text)
    assert info.value.kind is kind, str(info.value)
    return info.value


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture(scope="module")
def single_tree():
    return parse_nexus_file(tree_path("nexus_t1_n10.trees"))


@pytest.fixture(scope="module")
def translated():
    return parse_nexus_file(tree_path("nexus_t11_n20_translate.trees"))


@pytest.fixture(scope="module")
def commented():
    return parse_nexus_file(tree_path("nexus_t3_n10_comments.trees"))


# ======================================================================== #
# Sample files                                                              #
# ======================================================================== #


class TestSingleTree:
    def test_counts(self, single_tree):
        trees, labels = single_tree
        assert len(trees) == 1
        assert labels.num_labels() == 10
        assert trees[0].num_leaves() == 10

    def test_valid(self, single_tree):
        assert single_tree[0][0].is_valid()

    def test_taxa_block_fixes_label_order(self, single_tree):
        _, labels = single_tree
        assert labels.names == [f"Taxon_{i}" for i in range(1, 11)]

    def test_every_taxon_is_a_leaf(self, single_tree):
        trees, _ = single_tree
        assert leaf_label_set(trees[0]) == set(range(10))

    def test_size_hint_from_ntax(self, single_tree):
        assert single_tree[0][0].expected_leaves == 10


class TestTranslatedTrees:
    def test_counts(self, translated):
        trees, labels = translated
        assert len(trees) == 11
        assert labels.num_labels() == 20

    def test_every_tree_valid_with_all_leaves(self, translated):
        trees, _ = translated
        for tree in trees:
            assert tree.num_leaves() == 20
            assert tree.is_valid()
            assert leaf_label_set(tree) == set(range(20))

    def test_labels_are_translated_names(self, translated):
        _, labels = translated
        assert set(labels.names) == {f"Taxon_{i}" for i in range(1, 21)}

    def test_size_hint_from_translation(self, translated):
        assert translated[0][0].expected_leaves == 20

    def test_resolver_transition(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="nexwood"):
            parse_nexus_file(tree_path("nexus_t11_n20_translate.trees"))
        kinds = [
            r.args[-1] for r in caplog.records if r.getMessage().startswith("Parsed tree")
        ]
        assert kinds == ["translating"] + ["precomputed"] * 10


class TestCommentedFile:
    def test_counts(self, commented):
        trees, labels = commented
        assert len(trees) == 3
        assert labels.num_labels() == 10

    def test_trees_valid(self, commented):
        trees, _ = commented
        for tree in trees:
            assert tree.num_leaves() == 10
            assert tree.is_valid()

    def test_comment_before_branch_length(self, commented):
        trees, labels = commented
        taxon_6 = labels.get_index("Taxon_6")
        leaf = next(v for v in trees[2].leaves() if v.label_index == taxon_6)
        assert leaf.branch_length.value == pytest.approx(0.0934)

    def test_skipped_blocks_are_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="nexwood"):
            parse_nexus_file(tree_path("nexus_t3_n10_comments.trees"))
        messages = [r.getMessage() for r in caplog.records]
        assert any("'ASSUMPTIONS'" in m for m in messages)
        assert any("'notes'" in m for m in messages)
        assert any("Parsed 3 tree(s) over 10 taxa" in m for m in messages)


# ======================================================================== #
# Inline documents                                                          #
# ======================================================================== #


class TestStructure:
    def test_minimal_document(self):
        trees, labels = parse_nexus("#NEXUS\nBEGIN TREES;\nTREE t = (A:1.0,B:2.0);\nEND;\n")
        assert len(trees) == 1
        assert labels.names == ["A", "B"]

    def test_header_only(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nexwood"):
            trees, labels = parse_nexus("#NEXUS\n")
        assert trees == [] and len(labels) == 0
        assert any("No TREE statements" in r.getMessage() for r in caplog.records)

    def test_case_insensitive_keywords(self):
        text = "#nexus\nbegin Trees;\n  utree * best = ((a,b),c);\nendblock;\n"
        trees, labels = parse_nexus(text)
        assert len(trees) == 1
        assert labels.names == ["a", "b", "c"]

    @pytest.mark.parametrize(
        "statement", ["TREE*t=(A,B);", "TREE *t = (A,B);", "TREE* t=(A,B);"]
    )
    def test_default_tree_marker_without_spaces(self, statement):
        trees, labels = parse_nexus(f"#NEXUS BEGIN TREES; {statement} END;")
        assert len(trees) == 1
        assert labels.names == ["A", "B"]

    def test_accepts_bytes(self):
        trees, _ = parse_nexus(b"#NEXUS BEGIN TREES; TREE t=(A,B); END;")
        assert len(trees) == 1

    def test_taxa_block_seeds_direct_labels(self):
        text = (
            "#NEXUS\n"
            "BEGIN TAXA; DIMENSIONS NTAX=3; TAXLABELS C B A; END;\n"
            "BEGIN TREES; TREE t = ((A,B),C); END;\n"
        )
        trees, labels = parse_nexus(text)
        assert labels.names == ["C", "B", "A"]
        assert [v.label_index for v in trees[0].leaves()] == [2, 1, 0]

    def test_quoted_taxon_labels(self):
        text = (
            "#NEXUS\n"
            "BEGIN TAXA; DIMENSIONS NTAX=2; TAXLABELS 'Homo sapiens' 'Pan; sp.'; END;\n"
            "BEGIN TREES; TRANSLATE 1 'Homo sapiens', 2 'Pan; sp.'; TREE t = (1,2); END;\n"
        )
        trees, labels = parse_nexus(text)
        assert labels.names == ["Homo sapiens", "Pan; sp."]

    def test_translate_trailing_comma(self):
        text = "#NEXUS BEGIN TREES; TRANSLATE 1 A, 2 B,; TREE t = (1,2); END;"
        trees, labels = parse_nexus(text)
        assert labels.names == ["A", "B"]

    def test_translation_scoped_to_block(self):
        text = (
            "#NEXUS\n"
            "BEGIN TREES; TRANSLATE a Alpha, b Beta;\n"
            "  TREE one = (a,b); TREE two = (b,a);\nEND;\n"
            "BEGIN TREES; TREE three = (Beta,Gamma); TREE four = (a,Alpha); END;\n"
        )
        trees, labels = parse_nexus(text)
        assert len(trees) == 4
        assert labels.names == ["Alpha", "Beta", "Gamma", "a"]
        assert [v.label_index for v in trees[1].leaves()] == [1, 0]
        assert [v.label_index for v in trees[2].leaves()] == [1, 2]
        assert [v.label_index for v in trees[3].leaves()] == [3, 0]

    def test_unknown_statements_skipped(self):
        text = (
            "#NEXUS\n"
            "BEGIN TAXA; TITLE 'my; taxa'; DIMENSIONS NTAX=2 NCHAR=5; TAXLABELS A B; END;\n"
            "BEGIN TREES; LINK TAXA = x; TREE t = (A,B); END;\n"
        )
        trees, labels = parse_nexus(text)
        assert len(trees) == 1 and len(labels) == 2

    def test_leaf_count_mismatch_warning(self, caplog):
        text = (
            "#NEXUS\n"
            "BEGIN TAXA; DIMENSIONS NTAX=3; TAXLABELS A B C; END;\n"
            "BEGIN TREES; TREE partial = (A,B); END;\n"
        )
        with caplog.at_level(logging.WARNING, logger="nexwood"):
            trees, _ = parse_nexus(text)
        assert trees[0].is_valid()
        assert any(
            "'partial' has 2 leaves but 3 taxa" in r.getMessage() for r in caplog.records
        )

    def test_quiet_suppresses_logging(self, caplog):
        caplog.set_level(logging.INFO)
        with quiet():
            parse_nexus("#NEXUS BEGIN DATA; MATRIX x; END;")
        assert not [r for r in caplog.records if r.name.startswith("nexwood")]


# ======================================================================== #
# Diagnostics                                                               #
# ======================================================================== #


class TestDiagnostics:
    def test_missing_header(self):
        err = expect_error("BEGIN TREES; END;", ErrorKind.MISSING_NEXUS_HEADER)
        assert err.position == 0

    def test_missing_header_after_comment(self):
        err = expect_error("[c] #NEX\n", ErrorKind.MISSING_NEXUS_HEADER)
        assert err.position == 4

    def test_statement_outside_block(self):
        err = expect_error("#NEXUS\nfoo;", ErrorKind.INVALID_FORMATTING)
        assert err.position == 7

    def test_empty_block_name(self):
        expect_error("#NEXUS BEGIN ;", ErrorKind.INVALID_BLOCK_NAME)

    def test_block_name_without_terminator(self):
        expect_error("#NEXUS BEGIN TREES TREE", ErrorKind.INVALID_BLOCK_NAME)

    def test_eof_after_block_name(self):
        expect_error("#NEXUS BEGIN TREES", ErrorKind.UNEXPECTED_EOF)

    def test_eof_mid_block(self):
        expect_error(
            "#NEXUS\nBEGIN TREES;\nTREE t = (A,B);\n", ErrorKind.UNEXPECTED_EOF
        )

    def test_eof_in_skipped_block(self):
        expect_error("#NEXUS BEGIN DATA; MATRIX 'a;b' x", ErrorKind.UNEXPECTED_EOF)

    def test_end_inside_comment_does_not_close_block(self):
        expect_error("#NEXUS BEGIN DATA; [END;]", ErrorKind.UNEXPECTED_EOF)

    def test_eof_in_dimensions(self):
        expect_error("#NEXUS BEGIN TAXA; DIMENSIONS NTAX=2", ErrorKind.UNEXPECTED_EOF)

    def test_unclosed_comment(self):
        err = expect_error("#NEXUS BEGIN TREES; [oops", ErrorKind.UNCLOSED_COMMENT)
        assert err.position == 20

    def test_taxa_count_mismatch(self):
        err = expect_error(
            "#NEXUS BEGIN TAXA; DIMENSIONS NTAX=3; TAXLABELS A B; END;",
            ErrorKind.INVALID_TAXA_BLOCK,
        )
        assert "NTAX=3 but 2" in err.detail

    def test_bad_ntax(self):
        err = expect_error(
            "#NEXUS BEGIN TAXA; DIMENSIONS NTAX=many; END;",
            ErrorKind.INVALID_TAXA_BLOCK,
        )
        assert "'many'" in err.detail

    def test_dimensions_missing_equals(self):
        expect_error(
            "#NEXUS BEGIN TAXA; DIMENSIONS NTAX 3; END;", ErrorKind.INVALID_TAXA_BLOCK
        )

    def test_duplicate_taxon_label(self):
        err = expect_error(
            "#NEXUS BEGIN TAXA; TAXLABELS A B A; END;", ErrorKind.INVALID_TAXA_BLOCK
        )
        assert "Duplicate taxon label 'A'" in err.detail

    def test_duplicate_translation_key(self):
        err = expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 A, 1 B; END;",
            ErrorKind.INVALID_TREES_BLOCK,
        )
        assert "'1'" in err.detail

    def test_translation_missing_separator(self):
        expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 A 2 B; END;",
            ErrorKind.INVALID_TREES_BLOCK,
        )

    def test_translation_missing_name(self):
        expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 , 2 B; END;",
            ErrorKind.INVALID_TREES_BLOCK,
        )

    def test_second_translate(self):
        expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 A; TRANSLATE 2 B; END;",
            ErrorKind.INVALID_TREES_BLOCK,
        )

    def test_translate_after_tree(self):
        err = expect_error(
            "#NEXUS BEGIN TREES; TREE t = (A,B); TRANSLATE 1 A; END;",
            ErrorKind.INVALID_TREES_BLOCK,
        )
        assert "precede" in err.detail

    def test_tree_missing_equals(self):
        err = expect_error(
            "#NEXUS BEGIN TREES; TREE t (A,B); END;", ErrorKind.INVALID_TREES_BLOCK
        )
        assert "'='" in err.detail

    def test_tree_missing_name(self):
        expect_error("#NEXUS BEGIN TREES; TREE = (A,B); END;", ErrorKind.INVALID_TREES_BLOCK)

    def test_bad_tree_description(self):
        expect_error(
            "#NEXUS BEGIN TREES; TREE t = (A,B,C); END;",
            ErrorKind.INVALID_NEWICK_STRING,
        )

    def test_token_missing_from_translation_first_tree(self):
        err = expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 A, 2 B; TREE t = (1,3); END;",
            ErrorKind.INVALID_NEWICK_STRING,
        )
        assert "'3'" in err.detail

    def test_token_missing_from_translation_later_tree(self):
        err = expect_error(
            "#NEXUS BEGIN TREES; TRANSLATE 1 A, 2 B;"
            " TREE t = (1,2); TREE u = (2,C); END;",
            ErrorKind.INVALID_NEWICK_STRING,
        )
        assert "'C'" in err.detail


# ======================================================================== #
# File reading                                                              #
# ======================================================================== #


class TestParseNexusFile:
    def test_missing_file_is_os_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_nexus_file(tmp_path / "absent.trees")

    def test_accepts_path_objects(self, tmp_path):
        path = tmp_path / "one.trees"
        path.write_bytes(b"#NEXUS\nBEGIN TREES; TREE t = (A,B); END;\n")
        trees, _ = parse_nexus_file(path)
        assert len(trees) == 1


# ======================================================================== #
# Many trees sharing one translation table                                  #
# ======================================================================== #


def caterpillar(tokens) -> str:
    newick = f"{tokens[-1]}:0.2"
    for token in reversed(tokens[1:-1]):
        newick = f"({token}:0.1,{newick}):0.3"
    return f"({tokens[0]}:0.1,{newick});"


@pytest.mark.large_scale
def test_many_trees_share_translation():
    n_taxa, n_trees = 30, 2000
    keys = [str(i) for i in range(1, n_taxa + 1)]
    lines = ["#NEXUS", "BEGIN TREES;", "  TRANSLATE"]
    lines.append(",\n".join(f"    {k} taxon_{k}" for k in keys) + ";")
    for t in range(n_trees):
        shift = t % n_taxa
        lines.append(f"  TREE state_{t} = {caterpillar(keys[shift:] + keys[:shift])}")
    lines.append("END;")

    with quiet():
        trees, labels = parse_nexus("\n".join(lines))

    assert len(trees) == n_trees
    assert labels.names == [f"taxon_{k}" for k in keys]
    for tree in trees:
        assert tree.num_leaves() == n_taxa
        assert leaf_label_set(tree) == set(range(n_taxa))
    assert all(tree.is_valid() for tree in trees[::97])
