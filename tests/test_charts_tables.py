"""Tests for chart datasets, timeline grouping and table helpers."""

from __future__ import annotations

import json

import pytest


class TestCharts:
    def test_activity_by_hour(self, sample_analysis):
        from backend.lookups.charts import activity_by_hour
        chart = activity_by_hour(sample_analysis.events)
        assert len(chart["labels"]) == 24
        assert chart["labels"][0] == "0:00"
        totals = chart["totals"]
        assert totals[0] == 1
        assert totals[9] == 2
        assert totals[10] == 1
        assert totals[11] == 1
        assert sum(totals) == 5

    def test_activity_by_weekday(self, sample_analysis):
        from backend.lookups.charts import activity_by_weekday
        chart = activity_by_weekday(sample_analysis.events)
        # 2024-02-01 Thursday .. 2024-02-04 Sunday; Sunday listed first
        assert chart["labels"] == ["Domingo", "Jueves", "Viernes", "Sábado"]
        assert chart["totals"] == [1, 1, 1, 2]
        unknown = next(d for d in chart["datasets"] if d["label"] == "Desconocidas")
        assert unknown["data"] == [0, 0, 0, 1]

    def test_lookup_types(self, sample_analysis):
        from backend.lookups.charts import lookup_type_distribution
        chart = lookup_type_distribution(sample_analysis.events)
        assert chart["labels"] == ["Propias", "Ajenas", "Desconocidas"]
        assert chart["datasets"][0]["data"] == [2, 2, 1]

    def test_top_lists(self, sample_analysis):
        from backend.lookups.charts import top_subjects, top_users
        users = top_users(sample_analysis.users)
        assert users["labels"] == ["Bruno Diaz", "Ana"]
        subjects = top_subjects(sample_analysis.subjects, limit=1)
        assert subjects["labels"] == ["Perez Luis"]

    def test_timeline_by_day(self, sample_analysis):
        from backend.lookups.charts import timeline
        groups = timeline(sample_analysis.events)
        assert [g["time_key"] for g in groups] == ["2024-02-01", "2024-02-02", "2024-02-03", "2024-02-04"]
        busy = groups[2]
        assert busy["total"] == 2
        assert busy["other"] == 1 and busy["unknown"] == 1
        assert busy["unique_users"] == 1
        assert len(busy["events"]) == 2

    def test_timeline_by_hour_for_one_user(self, sample_analysis):
        from backend.lookups.charts import timeline
        groups = timeline(sample_analysis.events, mode="hour", actor_id="2")
        assert [g["time_key"] for g in groups] == ["2024-02-03 09:00", "2024-02-04 00:00"]
        assert groups[0]["total"] == 2

    def test_timeline_invalid_mode(self, sample_analysis):
        from backend.lookups.charts import timeline
        with pytest.raises(ValueError):
            timeline(sample_analysis.events, mode="week")

    def test_user_lookup_groups(self, sample_analysis):
        from backend.lookups.charts import user_lookup_groups
        groups = user_lookup_groups(sample_analysis.events, "2")
        assert [g["national_id"] for g in groups] == ["333", "222", "444"]
        assert groups[0]["is_self"]
        assert groups[-1]["is_unknown"]

    def test_generate_all_charts_json(self, sample_analysis):
        from backend.lookups.charts import generate_all_charts
        charts = generate_all_charts(sample_analysis)
        assert set(charts) == {
            "activity_by_weekday", "activity_by_hour", "lookup_types",
            "top_users", "top_subjects", "timeline",
        }
        json.dumps(charts, ensure_ascii=False)


class TestTables:
    def test_search_users(self, sample_analysis):
        from backend.lookups.tables import search_users
        users = sample_analysis.users
        assert [u.actor_id for u in search_users(users, "bruno")] == ["2"]
        assert [u.actor_id for u in search_users(users, "100")] == ["1"]
        assert [u.actor_id for u in search_users(users, "333")] == ["2"]
        assert len(search_users(users, "")) == 2
        assert search_users(users, "zzz") == []

    def test_search_subjects(self, sample_analysis):
        from backend.lookups.tables import search_subjects
        subjects = sample_analysis.subjects
        assert [s.national_id for s in search_subjects(subjects, "PEREZ")] == ["222"]
        assert [s.national_id for s in search_subjects(subjects, "111")] == ["111"]

    def test_sort_profiles(self, sample_analysis):
        from backend.lookups.tables import sort_profiles
        users = sample_analysis.users
        assert [u.actor_id for u in sort_profiles(users, "total")] == ["2", "1"]
        assert [u.actor_name for u in sort_profiles(users, "actor_name", descending=False)] == ["Ana", "Bruno Diaz"]
        # Properties work too
        assert sort_profiles(users, "active_days")[0].actor_id in ("1", "2")

    def test_sort_is_stable(self, sample_analysis):
        from backend.lookups.tables import sort_profiles
        subjects = sample_analysis.subjects
        # 333 and 111 both have total 1 and keep their relative order
        ordered = sort_profiles(subjects, "total")
        assert [s.national_id for s in ordered] == ["222", "333", "111"]
        assert [s.national_id for s in sort_profiles(ordered, "total")] == ["222", "333", "111"]

    def test_sort_unknown_field(self, sample_analysis):
        from backend.lookups.tables import sort_profiles
        with pytest.raises(ValueError):
            sort_profiles(sample_analysis.users, "no_such_field")

    def test_paginate(self):
        from backend.lookups.tables import paginate
        rows = list(range(25))
        page = paginate(rows, page=3, per_page=10)
        assert page.items == [20, 21, 22, 23, 24]
        assert page.total_pages == 3
        assert page.total_items == 25
        assert (page.first_index, page.last_index) == (21, 25)

    def test_paginate_clamps(self):
        from backend.lookups.tables import paginate
        assert paginate(list(range(25)), page=99).page == 3
        assert paginate(list(range(25)), page=0).page == 1
        empty = paginate([], page=2)
        assert empty.page == 1
        assert empty.total_pages == 0
        assert empty.items == []
        assert empty.first_index == 0

    def test_paginate_rejects_bad_size(self):
        from backend.lookups.tables import paginate
        with pytest.raises(ValueError):
            paginate([1, 2], per_page=0)
