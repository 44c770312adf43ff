"""Unit tests for the lifecycle policy (quit suppression, faults, content process)."""

import logging
import sys
import threading
from unittest.mock import Mock, patch

import psutil
import pytest

from signagebot.kiosk.effects import TerminateProcess
from signagebot.kiosk.events import ContentProcessGone
from signagebot.kiosk.lifecycle import (
    QUIT_PREVENTED_MESSAGE,
    LifecyclePolicy,
    LifecycleState,
    NoRecovery,
)


class TestQuitPolicy:
    """Test cases for request_quit."""

    def test_quit_suppressed_without_dev_or_override(self, context, caplog):
        """Production sessions keep running and log one diagnostic line."""
        policy = LifecyclePolicy(context)

        with caplog.at_level(logging.INFO, logger="signagebot.kiosk.lifecycle"):
            effects = policy.request_quit("content")

        assert effects == []
        assert policy.state is LifecycleState.RUNNING
        assert policy.suppressed_quits == 1
        matching = [r for r in caplog.records if r.getMessage() == QUIT_PREVENTED_MESSAGE]
        assert len(matching) == 1
        assert matching[0].levelno == logging.INFO
        assert "--allow-quit" in QUIT_PREVENTED_MESSAGE

    @pytest.mark.parametrize(
        "config", [{"dev_mode": True}, {"allow_explicit_quit": True}, {"dev_mode": True, "allow_explicit_quit": True}]
    )
    def test_quit_allowed_terminates(self, make_context, config):
        policy = LifecyclePolicy(make_context(**config))

        effects = policy.request_quit("content")

        assert effects == [TerminateProcess(exit_code=0)]
        assert policy.state is LifecycleState.TERMINATED

    def test_repeated_suppressed_quits_never_terminate(self, context):
        policy = LifecyclePolicy(context)

        for _ in range(5):
            assert policy.request_quit("signal SIGTERM") == []

        assert policy.state is LifecycleState.RUNNING
        assert policy.suppressed_quits == 5

    def test_quit_after_terminated_is_noop(self, make_context):
        policy = LifecyclePolicy(make_context(dev_mode=True))
        policy.request_quit("content")

        assert policy.request_quit("content") == []
        assert policy.state is LifecycleState.TERMINATED


class TestFaultHandling:
    """Test cases for host fault survival."""

    @pytest.fixture
    def policy(self, context):
        return LifecyclePolicy(context)

    def test_handle_fault_logs_and_counts(self, policy, caplog):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            error = e

        with caplog.at_level(logging.ERROR):
            policy.handle_fault(error, "while handling ContentReady")

        assert policy.fault_count == 1
        assert policy.last_fault == "RuntimeError: boom"
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert "while handling ContentReady" in record.getMessage()
        assert record.exc_info is not None

    def test_handle_fault_never_raises(self, policy):
        policy.handle_fault(ValueError("first"))
        policy.handle_fault(KeyError("second"))

        assert policy.fault_count == 2
        assert policy.state is LifecycleState.RUNNING

    def test_install_and_uninstall_fault_handlers(self, policy):
        original_hook = sys.excepthook
        original_thread_hook = threading.excepthook

        policy.install_fault_handlers()
        try:
            assert sys.excepthook == policy._excepthook
            assert threading.excepthook == policy._threading_excepthook
        finally:
            policy.uninstall_fault_handlers()

        assert sys.excepthook is original_hook
        assert threading.excepthook is original_thread_hook

    def test_excepthook_routes_exceptions_to_handle_fault(self, policy):
        policy.install_fault_handlers()
        try:
            error = RuntimeError("slot failed")
            sys.excepthook(RuntimeError, error, None)
        finally:
            policy.uninstall_fault_handlers()

        assert policy.fault_count == 1
        assert policy.last_fault == "RuntimeError: slot failed"

    def test_excepthook_passes_keyboard_interrupt_to_previous_hook(self, policy):
        previous = Mock()
        with patch.object(sys, "excepthook", previous):
            policy.install_fault_handlers()
            try:
                sys.excepthook(KeyboardInterrupt, KeyboardInterrupt(), None)
            finally:
                policy.uninstall_fault_handlers()

        previous.assert_called_once()
        assert policy.fault_count == 0

    def test_thread_faults_are_survived(self, policy):
        policy.install_fault_handlers()
        try:
            worker = threading.Thread(target=lambda: 1 / 0, name="worker")
            worker.start()
            worker.join()
        finally:
            policy.uninstall_fault_handlers()

        assert policy.fault_count == 1
        assert policy.last_fault.startswith("ZeroDivisionError")


class TestContentProcessObservation:
    """Test cases for content (renderer) process termination."""

    def test_default_hook_is_noop(self, context):
        policy = LifecyclePolicy(context)

        assert isinstance(policy.recovery_hook, NoRecovery)
        effects = policy.on_content_process_gone(ContentProcessGone("crashed", 139, pid=4242))

        assert effects == []
        assert policy.content_process_exits == 1
        assert policy.state is LifecycleState.RUNNING

    def test_termination_is_logged_with_details(self, context, caplog):
        policy = LifecyclePolicy(context)

        with caplog.at_level(logging.WARNING, logger="signagebot.kiosk.lifecycle"):
            policy.on_content_process_gone(ContentProcessGone("killed", 9, pid=77))

        assert "Content process gone" in caplog.text
        assert "'status': 'killed'" in caplog.text
        assert "'exit_code': 9" in caplog.text

    def test_recovery_hook_receives_event_and_context(self, context):
        hook = Mock(return_value=[TerminateProcess(exit_code=3)])
        policy = LifecyclePolicy(context, recovery_hook=hook)
        event = ContentProcessGone("crashed", 1)

        effects = policy.on_content_process_gone(event)

        hook.assert_called_once_with(event, context)
        assert effects == [TerminateProcess(exit_code=3)]

    def test_memory_diagnostics_failure_does_not_break_observation(self, context):
        policy = LifecyclePolicy(context)

        with patch(
            "signagebot.kiosk.lifecycle.psutil.Process", side_effect=psutil.AccessDenied()
        ):
            effects = policy.on_content_process_gone(ContentProcessGone("abnormal", 1))

        assert effects == []
        assert policy.content_process_exits == 1
