import subprocess
from reposerve.apkrepo.util import CommandFailed


def run_command(args, cwd=None, timeout=None):
    """
    Runs an external command and returns its standard output as text

    args - command and its arguments
    cwd - (optional) working directory
    timeout - (optional) seconds before the command is killed

    Raises CommandFailed if the command cannot be started, times out or
    exits with a non-zero status
    """
    command = args[0]
    try:
        result = subprocess.run(args, cwd=cwd, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        raise CommandFailed(command, 'timed out after {0}s'.format(timeout))
    except OSError as e:
        raise CommandFailed(command, str(e))

    stdout = result.stdout.decode('utf-8', errors='replace')
    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        raise CommandFailed(command, 'exited with status {0}: {1}'.format(
            result.returncode, stderr or stdout.strip()))

    return stdout
