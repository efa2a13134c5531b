from django.core.management.base import BaseCommand, CommandError
from reposerve.apkrepo.util import ReposerveException
from reposerve.apkrepo.views import get_repository_controller
from reposerve.apkrepo.management.util import parse_coordinate, init_cli_logger

class Command(BaseCommand):
    """
    'reindex' admin command
    """
    help = 'Rebuilds and signs the package index of repository directories'

    def add_arguments(self, parser):
        parser.add_argument('coordinates', nargs='*', metavar='version:repo:arch',
                            help='Directories to re-index (defaults to the whole tree)')

    def handle(self, *args, **options):

        logger = init_cli_logger(options)

        try:
            repository = get_repository_controller(logger)
            if options['coordinates']:
                coordinates = [parse_coordinate(c) for c in options['coordinates']]
            else:
                coordinates = repository.list_coordinates()

            failures = 0
            for coordinate in coordinates:
                (indexed, signed) = repository.refresh_index(coordinate)
                if indexed and signed:
                    self.stdout.write('{0}: indexed and signed'.format(coordinate))
                else:
                    failures += 1
                    self.stderr.write('{0}: {1}'.format(
                        coordinate, 'unsigned' if indexed else 'index failed'))

        except ReposerveException as e:
            raise CommandError(e)

        if failures:
            raise CommandError('{0} of {1} directories were not refreshed'.format(
                failures, len(coordinates)))
