import subprocess
import sys
import os


def _unexpected_stderr(stderr_output):
    # Harmless messages Qt may print in the offscreen platform
    return [
        line for line in stderr_output.splitlines()
        if "QApplication" not in line and "qt." not in line.lower() and "This plugin does not support" not in line
    ]


def test_run_main_no_errors(tmp_path):
    """
    Run main.py briefly and check that nothing unexpected is written to stderr.
    """
    main_py_path = os.path.join(os.path.dirname(__file__), '..', 'main.py')

    env = os.environ.copy()
    env['QT_QPA_PLATFORM'] = 'offscreen'
    env['STUDENT_SUBMISSION_DATA_DIR'] = str(tmp_path)

    try:
        result = subprocess.run(
            [sys.executable, main_py_path],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
            env=env
        )
    except subprocess.TimeoutExpired as e:
        # Timing out means the window is up and waiting for input
        stderr_output = e.stderr.decode('utf-8', errors='ignore') if e.stderr else ""
        filtered_stderr = _unexpected_stderr(stderr_output)
        assert not filtered_stderr, f"Unexpected errors while running main.py (timeout):\n{''.join(filtered_stderr)}"
        return

    filtered_stderr = _unexpected_stderr(result.stderr)
    assert not filtered_stderr, f"Errors while running main.py:\n{''.join(filtered_stderr)}"
