"""Tests for operation logging and the @operation decorator."""

from unittest.mock import MagicMock, patch

import pytest

from realm_cms_core.config import AppConfig, FeatureFlags, set_config
from realm_cms_core.context.operation_context import (
    OperationContext,
    OperationHandler,
    operation,
)
from realm_cms_core.context.tenant_context import tenant_context
from realm_cms_core.exceptions import (
    ValidationError,
    get_correlation_id,
    set_correlation_id,
)


class TestOperationContext:
    def test_reuses_existing_correlation_id(self):
        set_correlation_id("corr-1")

        ctx = OperationContext("create_entity")

        assert ctx.correlation_id == "corr-1"
        assert ctx.context["operation_id"] == ctx.operation_id

    def test_new_correlation_id_is_published(self):
        ctx = OperationContext("create_entity")

        assert get_correlation_id() == ctx.correlation_id

    def test_metrics_and_context(self):
        ctx = OperationContext("import")
        ctx.add_metric("rows", 3)
        ctx.add_context(source="csv")

        assert ctx.metrics == {"rows": 3}
        assert ctx.context["source"] == "csv"
        assert ctx.duration_ms >= 0


class TestOperationHandler:
    def test_logs_enter_and_exit_with_realm(self):
        logger = MagicMock()

        with tenant_context("realm-1", "p1"):
            with OperationHandler(logger).operation("assign") as op_ctx:
                op_ctx.add_metric("assigned", 1)

        enter, exit_ = logger.info.call_args_list
        assert enter.args[0] == "ENTER: assign"
        assert enter.kwargs["extra"]["realm_id"] == "realm-1"
        assert exit_.kwargs["extra"]["status"] == "success"
        assert exit_.kwargs["extra"]["assigned"] == 1

    def test_domain_error_is_enriched_and_reraised(self):
        logger = MagicMock()

        with pytest.raises(ValidationError) as exc_info:
            with OperationHandler(logger).operation("publish"):
                raise ValidationError("missing", field="classifications")

        assert exc_info.value.context["operation_name"] == "publish"
        assert logger.error.call_args.kwargs["extra"]["status"] == "error"

    def test_unexpected_error_is_logged_with_traceback(self):
        logger = MagicMock()

        with pytest.raises(KeyError):
            with OperationHandler(logger).operation("publish"):
                raise KeyError("slug")

        assert logger.exception.call_args.kwargs["extra"]["error_type"] == "KeyError"


class _Service:
    @operation()
    def rename(self, slug, fields=None):
        return slug.upper()

    @operation(name="custom.name")
    def named(self):
        return "ok"


class TestOperationDecorator:
    def test_wraps_in_operation(self):
        with patch("realm_cms_core.context.operation_context.OperationHandler") as handler:
            assert _Service().rename("nl", fields={"a": 1}) == "NL"

        name = handler.return_value.operation.call_args.args[0]
        assert name.endswith("_Service.rename")

    def test_explicit_name(self):
        with patch("realm_cms_core.context.operation_context.OperationHandler") as handler:
            _Service().named()

        assert handler.return_value.operation.call_args.args[0] == "custom.name"

    def test_disabled_by_feature_flag(self):
        set_config(AppConfig(features=FeatureFlags(enable_operation_context=False)))

        with patch("realm_cms_core.context.operation_context.OperationHandler") as handler:
            assert _Service().rename("fy") == "FY"

        handler.assert_not_called()
