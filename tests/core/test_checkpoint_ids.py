"""Tests for hierarchical checkpoint identifiers."""

from __future__ import annotations

import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

tokens = st.text(alphabet=string.ascii_letters + string.digits + "-_.:", min_size=1, max_size=8)


class TestCheckpointID:
    """Tests for CheckpointID construction and ancestry."""

    def test_child_extends_parent(self) -> None:
        """child() appends tokens, keeping the parent a prefix."""
        from ghbackup.core.checkpoint import ROOT

        parent = ROOT.child("issues", "open")
        child = parent.child(12)

        assert child.tokens == ("issues", "open", "12")
        assert parent.is_ancestor_of(child)
        assert not child.is_ancestor_of(parent)

    def test_ancestry_is_token_wise(self) -> None:
        """issues/open/1 is not an ancestor of issues/open/10."""
        from ghbackup.core.checkpoint import CheckpointID

        one = CheckpointID.parse("issues/open/1")
        ten = CheckpointID.parse("issues/open/10")

        assert not one.is_ancestor_of(ten)
        assert not ten.is_ancestor_of(one)
        assert str(ten).startswith(str(one))

    def test_is_ancestor_of_is_strict(self) -> None:
        """An id is not its own ancestor, but contains itself."""
        from ghbackup.core.checkpoint import CheckpointID

        cp = CheckpointID.parse("teams/7")

        assert not cp.is_ancestor_of(cp)
        assert cp.contains(cp)

    def test_root_is_ancestor_of_everything(self) -> None:
        """The empty id prefixes every non-root id."""
        from ghbackup.core.checkpoint import ROOT, CheckpointID

        assert ROOT.is_root
        assert ROOT.is_ancestor_of(CheckpointID.parse("hooks"))
        assert str(ROOT) == ""

    def test_parse_blank_is_root(self) -> None:
        """Whitespace-only text parses to the root id."""
        from ghbackup.core.checkpoint import CheckpointID

        assert CheckpointID.parse("  \n").is_root

    @pytest.mark.parametrize("token", ["", "a/b", "two words", "tab\there"])
    def test_invalid_tokens_rejected(self, token: str) -> None:
        """Tokens that would break the text form raise ValueError."""
        from ghbackup.core.checkpoint import ROOT

        with pytest.raises(ValueError):
            ROOT.child(token)

    @given(parts=st.lists(tokens, min_size=1, max_size=6))
    def test_text_form_round_trips(self, parts: list[str]) -> None:
        """parse(str(id)) rebuilds the same id."""
        from ghbackup.core.checkpoint import CheckpointID

        cp = CheckpointID(tuple(parts))

        assert CheckpointID.parse(str(cp)) == cp

    @given(
        prefix=st.lists(tokens, max_size=4),
        suffix=st.lists(tokens, min_size=1, max_size=4),
    )
    def test_prefix_is_ancestor(self, prefix: list[str], suffix: list[str]) -> None:
        """Any strict token prefix is an ancestor."""
        from ghbackup.core.checkpoint import CheckpointID

        parent = CheckpointID(tuple(prefix))

        assert parent.is_ancestor_of(parent.child(*suffix))


class TestCheckpointVocabulary:
    """Tests for the fixed GitHub checkpoint vocabulary."""

    def test_user_sections_under_base(self) -> None:
        """Owner user sections nest under the owner step."""
        from ghbackup.core.checkpoint import points

        owner = points.repo_owner()

        assert str(points.user_followers()) == "followers"
        assert str(points.user_follows(owner)) == "owner/follows"
        assert owner.is_ancestor_of(points.user_orgs(owner))

    def test_pull_sections_nest_under_pull(self) -> None:
        """Both pull request sections sit under the structural pull id."""
        from ghbackup.core.checkpoint import points

        pull = points.pull("closed", 4)

        assert str(points.pull_merged("closed", 4)) == "pulls/closed/4/merged"
        assert pull.is_ancestor_of(points.pull_comments("closed", 4))
        assert points.pulls("closed").is_ancestor_of(pull)

    def test_milestone_states_are_distinct(self) -> None:
        """Open and closed milestones resume independently."""
        from ghbackup.core.checkpoint import points

        assert points.milestones("open") != points.milestones("closed")
        assert not points.milestones("open").contains(points.milestones("closed"))
        assert not points.milestones("closed").contains(points.milestones("open"))
