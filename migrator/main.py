import argparse
import sys
import traceback
from pathlib import Path

from migrator.config import load_settings
from migrator.connection import connect
from migrator.engine import MigrationEngine
from migrator.errors import InvalidArgumentError, MigratorError
from migrator.schema import Kind
from migrator.scripts import scripts_dir
from migrator.util import print_error
from migrator.version import __version__

ACTIONS = ['up', 'down', 'reset', 'new']


def main():
    try:
        exit_code = cli(sys.argv[1:])
        sys.exit(exit_code)
    except Exception:
        print_error(traceback.format_exc())
        sys.exit(1)


def cli(raw_arguments, root=None):
    try:
        args = parse_arguments(raw_arguments)
    except SystemExit as e:
        # --help and --version exit with 0, malformed flags with 2
        return 0 if e.code in (0, None) else 1
    try:
        validate_arguments(args)
    except InvalidArgumentError as e:
        print_error(str(e))
        return 1

    kind = Kind(args.type)
    directory = scripts_dir(Path(root) if root else Path.cwd(), args.driver, kind)
    database = None
    try:
        if args.action != 'new':
            database = connect(args.driver, load_settings())
        engine = MigrationEngine(database, directory, kind)
        run_action(engine, args.action, args.name)
    except MigratorError as e:
        print_error('{} {} failed: {}'.format(kind.label, args.action.upper(), e))
        return 1
    finally:
        if database is not None:
            database.close()
    return 0


def run_action(engine, action, name=''):
    if action == 'up':
        return engine.up()
    elif action == 'down':
        return engine.down()
    elif action == 'reset':
        return engine.reset()
    elif action == 'new':
        return engine.new(name)
    raise InvalidArgumentError('Invalid action "{}"'.format(action))


def validate_arguments(args):
    if args.type not in Kind.values():
        raise InvalidArgumentError('Invalid type. Please use "migration" or "seed".')
    if args.action not in ACTIONS:
        raise InvalidArgumentError('Invalid action. Please use "up", "down", "reset" or "new".')
    if args.action == 'new' and args.type == Kind.SEED.value and not args.name:
        raise InvalidArgumentError('Invalid name. Please use "new seed" followed by --name.')


def parse_arguments(arguments):
    parser = argparse.ArgumentParser(prog='migrator', description='apply versioned SQL scripts')
    parser.add_argument('--version', action='version', version=__version__)

    action_help = 'up applies pending scripts, down reverts the last one, reset reverts all, new creates one'
    parser.add_argument('--action', default='up', help=action_help)

    driver_help = 'database driver, also the directory under db/ holding the scripts'
    parser.add_argument('--driver', default='postgres', help=driver_help)

    parser.add_argument('--type', default=Kind.MIGRATION.value, help='migration or seed')
    parser.add_argument('--name', default='', help='name of the script created by --action=new')

    args, _unknown = parser.parse_known_args(arguments)
    return args


if __name__ == '__main__':
    main()
