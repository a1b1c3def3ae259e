"""Tests for dotted-path field resolution."""

import pytest

from decision_engine.engine import ABSENT, NodeResult, get_path, resolve


class TestGetPath:
    def test_nested_mapping(self):
        assert get_path({"user": {"name": "Ada"}}, "user.name") == "Ada"

    def test_list_index(self):
        assert get_path({"loans": [{"amount": 10}, {"amount": 20}]}, "loans.1.amount") == 20

    def test_missing_segment_is_absent(self):
        assert get_path({"user": {}}, "user.name") is ABSENT

    def test_walking_into_scalar_is_absent(self):
        assert get_path({"score": 700}, "score.value") is ABSENT

    def test_out_of_range_index_is_absent(self):
        assert get_path({"loans": []}, "loans.0") is ABSENT

    def test_explicit_none_is_not_absent(self):
        assert get_path({"income": None}, "income") is None

    def test_empty_path(self):
        assert get_path({"a": 1}, "") is ABSENT


class TestResolve:
    @pytest.fixture
    def context(self, make_context):
        ctx = make_context({"riskScore": 847, "applicant": {"state": "CA"}})
        ctx.output_data = {"bureau": {"creditScore": 720}, "riskScore": 1}
        ctx.node_results["c1"] = NodeResult(kind="condition", payload={"allConditionsTrue": True})
        return ctx

    def test_bare_path_reads_input(self, context):
        assert resolve("riskScore", context) == 847
        assert resolve("applicant.state", context) == "CA"

    def test_input_wins_over_output(self, context):
        assert resolve("riskScore", context) == 847

    def test_falls_back_to_output(self, context):
        assert resolve("bureau.creditScore", context) == 720

    def test_result_payload_wins(self, context):
        assert resolve("riskScore", context, {"riskScore": 5}) == 5

    def test_context_keys(self, context):
        assert resolve("inputData.riskScore", context) == 847
        assert resolve("outputData.bureau.creditScore", context) == 720
        assert resolve("executionId", context) == "exec_test"
        assert resolve("nodeResults.c1.allConditionsTrue", context) is True

    def test_result_key_addresses_guarded_payload(self, context):
        assert resolve("result.anyConditionTrue", context, {"anyConditionTrue": False}) is False
        assert resolve("result.anyConditionTrue", context) is ABSENT

    def test_unresolvable(self, context):
        assert resolve("does.not.exist", context) is ABSENT
        assert resolve("", context) is ABSENT

    def test_data_fields_named_like_context_keys(self, make_context):
        context = make_context({"result": "approved", "inputData": {"nested": 1}})

        assert resolve("result", context) == "approved"
        assert resolve("inputData.nested", context) == 1
        assert resolve("inputData.result", context) == "approved"

    def test_guarded_payload_field_named_result(self, context):
        assert resolve("result", context, {"result": "approved"}) == "approved"
