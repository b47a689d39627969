"""
Tests for IssueQueryService: filtering, sorting, pagination and hydration.
"""

from __future__ import annotations

from typing import Any

import pytest

from issue_tracker.schemas.enums import SystemPropertyId
from issue_tracker.schemas.issue import CreateIssueInput, IssueRead
from issue_tracker.schemas.query import FilterCondition, SortConfig
from issue_tracker.services.exceptions import (
    FormatError,
    NotFoundError,
    UnsupportedOperatorError,
)
from issue_tracker.services.issue_service import IssueService
from issue_tracker.services.query_service import IssueQueryService

WORKSPACE = "ws-test"
OTHER_WORKSPACE = "ws-other"

ID = SystemPropertyId.ID.value
TITLE = SystemPropertyId.TITLE.value
STATUS = SystemPropertyId.STATUS.value
PRIORITY = SystemPropertyId.PRIORITY.value
MINERS = SystemPropertyId.MINERS.value
ASSIGNEE = SystemPropertyId.ASSIGNEE.value


async def create(service: IssueService, workspace_id: str = WORKSPACE, **property_values: Any) -> str:
    result = await service.create_issue(
        CreateIssueInput(workspace_id=workspace_id, property_values=property_values)
    )
    assert result.success, result.errors
    return result.issue_id


def where(property_id: str, property_type: str, operator: str, value: Any) -> FilterCondition:
    return FilterCondition(
        property_id=property_id,
        property_type=property_type,
        operator=operator,
        value=value,
    )


def titles(issues: list[IssueRead]) -> list[str | None]:
    return [issue.get_value(TITLE) for issue in issues]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def sample_issues(issue_service: IssueService) -> dict[str, str]:
    """Four issues with a spread of statuses, priorities and miners."""
    return {
        "fan": await create(
            issue_service, **{TITLE: "Fan failure", STATUS: "open", PRIORITY: "p1", MINERS: ["m1", "m2"]}
        ),
        "psu": await create(
            issue_service, **{TITLE: "PSU overheating", STATUS: "open", PRIORITY: "p0", MINERS: ["m3"]}
        ),
        "net": await create(issue_service, **{TITLE: "Network down", STATUS: "closed", ASSIGNEE: "u1"}),
        "fan2": await create(issue_service, **{TITLE: "fan_noise 100%", STATUS: "resolved", MINERS: ["m2"]}),
    }


# =============================================================================
# Listing without filters
# =============================================================================


class TestListIssues:
    """Tests for IssueQueryService.list_issues() ordering and pagination."""

    async def test_default_order_is_newest_first(
        self, query_service: IssueQueryService, sample_issues: dict[str, str]
    ):
        result = await query_service.list_issues(workspace_id=WORKSPACE)

        assert result.total == 4
        assert titles(result.issues) == ["fan_noise 100%", "Network down", "PSU overheating", "Fan failure"]

    async def test_pagination(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        page_1 = await query_service.list_issues(page=1, page_size=3, workspace_id=WORKSPACE)
        page_2 = await query_service.list_issues(page=2, page_size=3, workspace_id=WORKSPACE)

        assert len(page_1.issues) == 3
        assert len(page_2.issues) == 1
        assert page_1.total == page_2.total == 4
        assert page_1.pages == 2
        ids = {i.issue_id for i in page_1.issues} | {i.issue_id for i in page_2.issues}
        assert ids == set(sample_issues.values())

    async def test_hydration(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        issue = await query_service.get_issue_by_id(sample_issues["fan"])

        assert issue.get_value(TITLE) == "Fan failure"
        assert issue.get_value(MINERS) == ["m1", "m2"]
        assert issue.get_value(ID) == "1"
        assert issue.get_value(ASSIGNEE) is None

    async def test_sort_nulls_last_both_directions(
        self, query_service: IssueQueryService, sample_issues: dict[str, str]
    ):
        ascending = await query_service.list_issues(
            sort=[SortConfig(id=PRIORITY)], workspace_id=WORKSPACE
        )
        descending = await query_service.list_issues(
            sort=[SortConfig(id=PRIORITY, desc=True)], workspace_id=WORKSPACE
        )

        assert titles(ascending.issues)[:2] == ["PSU overheating", "Fan failure"]
        assert titles(descending.issues)[:2] == ["Fan failure", "PSU overheating"]
        assert {i.issue_id for i in ascending.issues[2:]} == {sample_issues["net"], sample_issues["fan2"]}
        assert {i.issue_id for i in descending.issues[2:]} == {sample_issues["net"], sample_issues["fan2"]}

    async def test_sort_keys_compose(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        result = await query_service.list_issues(
            sort=[SortConfig(id=STATUS), SortConfig(id=TITLE, desc=True)],
            workspace_id=WORKSPACE,
        )

        assert titles(result.issues) == ["Network down", "PSU overheating", "Fan failure", "fan_noise 100%"]

    async def test_id_sorts_numerically(self, issue_service: IssueService, query_service: IssueQueryService):
        await issue_service.create_issues(
            [CreateIssueInput(workspace_id=WORKSPACE, property_values={TITLE: f"#{n}"}) for n in range(10)]
        )

        result = await query_service.list_issues(sort=[SortConfig(id=ID)], workspace_id=WORKSPACE)

        assert [issue.get_value(ID) for issue in result.issues] == [str(n) for n in range(1, 11)]

    async def test_sort_by_list_property_uses_first_element(
        self, query_service: IssueQueryService, sample_issues: dict[str, str]
    ):
        result = await query_service.list_issues(sort=[SortConfig(id=MINERS)], workspace_id=WORKSPACE)

        assert [i.issue_id for i in result.issues][:3] == [
            sample_issues["fan"],
            sample_issues["fan2"],
            sample_issues["psu"],
        ]

    async def test_unknown_sort_property(self, query_service: IssueQueryService):
        with pytest.raises(NotFoundError):
            await query_service.list_issues(sort=[SortConfig(id="property9999")], workspace_id=WORKSPACE)

    @pytest.mark.parametrize(("page", "page_size"), [(0, 10), (1, 0), (1, 101)])
    async def test_bad_pagination(self, query_service: IssueQueryService, page: int, page_size: int):
        with pytest.raises(FormatError):
            await query_service.list_issues(page=page, page_size=page_size, workspace_id=WORKSPACE)

    async def test_workspace_isolation(self, issue_service: IssueService, query_service: IssueQueryService):
        mine = await create(issue_service, **{TITLE: "Mine", STATUS: "open"})
        await create(issue_service, workspace_id=OTHER_WORKSPACE, **{TITLE: "Theirs", STATUS: "open"})

        unfiltered = await query_service.list_issues(workspace_id=WORKSPACE)
        filtered = await query_service.list_issues(
            filters=[where(STATUS, "select", "in", ["open"])], workspace_id=WORKSPACE
        )

        assert [i.issue_id for i in unfiltered.issues] == [mine]
        assert unfiltered.total == 1
        assert [i.issue_id for i in filtered.issues] == [mine]
        assert filtered.total == 1

    async def test_soft_deleted_issue_disappears(
        self,
        issue_service: IssueService,
        query_service: IssueQueryService,
        sample_issues: dict[str, str],
    ):
        await issue_service.delete_issue(sample_issues["fan"])

        unfiltered = await query_service.list_issues(workspace_id=WORKSPACE)
        filtered = await query_service.list_issues(
            filters=[where(STATUS, "select", "in", ["open"])], workspace_id=WORKSPACE
        )

        assert unfiltered.total == 3
        assert [i.issue_id for i in filtered.issues] == [sample_issues["psu"]]
        assert filtered.total == 1
        with pytest.raises(NotFoundError):
            await query_service.get_issue_by_id(sample_issues["fan"])


# =============================================================================
# Filtering
# =============================================================================


class TestFilters:
    """Tests for filter evaluation and intersection."""

    async def test_select_in(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        result = await query_service.list_issues(
            filters=[where(STATUS, "select", "in", ["open", "resolved"])], workspace_id=WORKSPACE
        )

        assert result.total == 3
        assert {i.issue_id for i in result.issues} == {
            sample_issues["fan"],
            sample_issues["psu"],
            sample_issues["fan2"],
        }

    async def test_text_operators(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        contains = await query_service.list_issues(
            filters=[where(TITLE, "text", "contains", "fan")], workspace_id=WORKSPACE
        )
        starts = await query_service.list_issues(
            filters=[where(TITLE, "text", "startsWith", "PSU")], workspace_id=WORKSPACE
        )
        ends = await query_service.list_issues(
            filters=[where(TITLE, "text", "endsWith", "down")], workspace_id=WORKSPACE
        )
        equals = await query_service.list_issues(
            filters=[where(TITLE, "text", "eq", "Network down")], workspace_id=WORKSPACE
        )

        assert sample_issues["fan2"] in {i.issue_id for i in contains.issues}
        assert [i.issue_id for i in starts.issues] == [sample_issues["psu"]]
        assert [i.issue_id for i in ends.issues] == [sample_issues["net"]]
        assert [i.issue_id for i in equals.issues] == [sample_issues["net"]]

    async def test_wildcards_are_literal(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        underscore = await query_service.list_issues(
            filters=[where(TITLE, "text", "contains", "n_f")], workspace_id=WORKSPACE
        )
        percent = await query_service.list_issues(
            filters=[where(TITLE, "text", "contains", "%")], workspace_id=WORKSPACE
        )

        assert underscore.total == 0
        assert [i.issue_id for i in percent.issues] == [sample_issues["fan2"]]

    @pytest.mark.parametrize("value", ["", "   "])
    async def test_blank_text_filter_rejected(
        self, query_service: IssueQueryService, sample_issues: dict[str, str], value: str
    ):
        with pytest.raises(FormatError):
            await query_service.list_issues(
                filters=[where(TITLE, "text", "contains", value)], workspace_id=WORKSPACE
            )

    async def test_multi_value_filter(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        result = await query_service.list_issues(
            filters=[where(MINERS, "miners", "in", ["m2"])], workspace_id=WORKSPACE
        )

        assert {i.issue_id for i in result.issues} == {sample_issues["fan"], sample_issues["fan2"]}
        assert result.total == 2

    async def test_id_filter(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        result = await query_service.list_issues(
            filters=[where(ID, "id", "in", ["2", 3])], workspace_id=WORKSPACE
        )

        assert {i.issue_id for i in result.issues} == {sample_issues["psu"], sample_issues["net"]}

    async def test_filters_intersect(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        status_only = await query_service.list_issues(
            filters=[where(STATUS, "select", "in", ["open"])], workspace_id=WORKSPACE
        )
        both = await query_service.list_issues(
            filters=[
                where(STATUS, "select", "in", ["open"]),
                where(MINERS, "miners", "in", ["m2"]),
            ],
            workspace_id=WORKSPACE,
        )

        assert both.total <= status_only.total
        assert {i.issue_id for i in both.issues} <= {i.issue_id for i in status_only.issues}
        assert [i.issue_id for i in both.issues] == [sample_issues["fan"]]

    async def test_empty_intersection_short_circuits(
        self, query_service: IssueQueryService, sample_issues: dict[str, str], monkeypatch
    ):
        lookups: list[str] = []
        original = query_service._match_predicate

        async def counting_match(predicate, workspace_id):
            lookups.append(predicate.property_id)
            return await original(predicate, workspace_id)

        monkeypatch.setattr(query_service, "_match_predicate", counting_match)

        result = await query_service.list_issues(
            filters=[
                where(STATUS, "select", "in", ["closed"]),
                where(MINERS, "miners", "in", ["m1"]),
                where(TITLE, "text", "contains", "Fan"),
            ],
            workspace_id=WORKSPACE,
        )

        assert result.issues == []
        assert result.total == 0
        assert lookups == [STATUS, MINERS]

    async def test_empty_in_matches_nothing(self, query_service: IssueQueryService, sample_issues: dict[str, str]):
        result = await query_service.list_issues(
            filters=[where(STATUS, "select", "in", [])], workspace_id=WORKSPACE
        )

        assert result.total == 0

    async def test_unsupported_operator(
        self, query_service: IssueQueryService, sample_issues: dict[str, str], caplog
    ):
        with pytest.raises(UnsupportedOperatorError):
            await query_service.list_issues(
                filters=[where(STATUS, "select", "contains", "op")], workspace_id=WORKSPACE
            )

        assert "Rejected filter" in caplog.text

    async def test_unknown_type_falls_back_to_equality(
        self, query_service: IssueQueryService, sample_issues: dict[str, str]
    ):
        result = await query_service.list_issues(
            filters=[where(ASSIGNEE, "mystery", "whatever", "u1")], workspace_id=WORKSPACE
        )

        assert [i.issue_id for i in result.issues] == [sample_issues["net"]]
