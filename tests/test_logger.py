"""Tests for logging setup and progress tracking."""

import io
import logging

from gce_provision.utils.logger import (
    LOGGER_NAME,
    CleanFormatter,
    log_api_call,
    log_state_change,
    setup_logging,
)
from gce_provision.utils.progress import (
    ProgressTracker,
    SimpleProgressTracker,
    create_progress_tracker,
)


def make_record(level, message):
    return logging.LogRecord('test', level, __file__, 1, message, None, None)


def test_clean_formatter():
    formatter = CleanFormatter()

    assert formatter.format(make_record(logging.INFO, 'Creating instance')) == 'Creating instance'
    assert formatter.format(make_record(logging.ERROR, 'boom')) == '[X] ERROR: boom'
    assert formatter.format(make_record(logging.DEBUG, 'poll')) == '[DEBUG] poll'


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / 'logs' / 'gce.log'

    setup_logging('INFO')
    logger = setup_logging('WARNING', log_file=str(log_file))

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 2

    logger.warning('disk left behind')
    for handler in logger.handlers:
        handler.flush()
    assert 'disk left behind' in log_file.read_text()

    setup_logging('INFO')


def test_debug_forces_debug_level():
    assert setup_logging('ERROR', debug=True).level == logging.DEBUG
    setup_logging('INFO')


def test_debug_helpers(caplog):
    logger = logging.getLogger('gce_provision.tests')

    with caplog.at_level(logging.DEBUG, logger='gce_provision.tests'):
        log_api_call(logger, 'disks.insert', project='p', zone='z')
        log_state_change(logger, 'instance', 'CREATING', 'READY')
        log_api_call(None, 'ignored')

    assert 'API call: disks.insert(project=p, zone=z)' in caplog.text
    assert 'State change: instance: CREATING -> READY' in caplog.text


def test_progress_trackers():
    stream = io.StringIO()
    tracker = ProgressTracker(total_steps=2, desc='Create instance', stream=stream)

    with tracker:
        tracker.update_step('Creating boot disk')
        tracker.advance()
        tracker.advance()

    assert tracker.current_step == 2
    assert tracker.bar is None
    assert 'Create instance' in stream.getvalue()

    silent = create_progress_tracker(total_steps=5, enabled=False)
    assert type(silent) is SimpleProgressTracker
    silent.start()
    silent.advance(3)
    silent.finish()
    assert silent.current_step == 3
