#!/usr/bin/env python
import argparse
import os
import sys
from django.core.management import execute_from_command_line


def main(argv=None):
    """
    Entry point of the 'reposerve' command

    An optional -c/--config before the subcommand selects the YAML
    configuration file; everything else goes to Django's management commands.
    """
    argv = list(sys.argv if argv is None else argv)

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('-c', '--config')
    (options, remaining) = parser.parse_known_args(argv[1:])
    if options.config:
        if not os.path.exists(options.config):
            print("Can't open {0}".format(options.config), file=sys.stderr)
            sys.exit(1)
        os.environ['REPOSERVE_CONFIG'] = os.path.abspath(options.config)

    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reposerve.settings')
    execute_from_command_line([argv[0]] + remaining)


if __name__ == "__main__":
    main()
