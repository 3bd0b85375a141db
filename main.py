import argparse
import getpass
import logging
import sys

import logger_setup
from constants import APP_NAME, APP_VERSION
from exceptions import HotspotError, InvalidConfigError, PrivilegeError
from localization import SUPPORTED_LANGUAGES, get_string, initialize_language, set_language
from app_logic import Environment, HotspotConfig, Orchestrator, RetryPrompt, validate_index

logger = logging.getLogger(__name__)

COMMANDS = ('start', 'stop', 'show')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME.lower(),
        description="Share an Internet connection through a Windows hosted network.")
    parser.add_argument('command', nargs='?', choices=COMMANDS, default='start',
                        help="Operation to run (default: start).")
    parser.add_argument('--lang', choices=SUPPORTED_LANGUAGES,
                        help="Interface language for this run (default: system locale).")
    parser.add_argument('--version', action='version', version=f"{APP_NAME} {APP_VERSION}")
    return parser


def print_banner():
    print(get_string('banner', app_name=APP_NAME, version=APP_VERSION))
    print(get_string('banner_underline'))


def prompt_credentials(input_func=input, getpass_func=getpass.getpass) -> HotspotConfig:
    """Asks the operator for SSID and key. Cancelling is an invalid configuration."""
    try:
        ssid = input_func(get_string('prompt_ssid')).strip()
        key = getpass_func(get_string('prompt_key'))
    except (EOFError, KeyboardInterrupt) as e:
        raise InvalidConfigError(get_string('prompt_cancelled')) from e
    return HotspotConfig(ssid=ssid, key=key)


def prompt_uplink(candidates, input_func=input) -> int:
    """Lists the candidates and asks until the operator picks a valid index."""
    print(get_string('uplink_list_title'))
    for index, adapter in enumerate(candidates):
        print(get_string('uplink_list_item', index=index, name=adapter.name,
                         device_name=adapter.device_name))
    while True:
        try:
            answer = input_func(get_string('prompt_uplink', last=len(candidates) - 1))
        except (EOFError, KeyboardInterrupt) as e:
            raise InvalidConfigError(get_string('prompt_cancelled')) from e
        result = validate_index(candidates, answer)
        if not isinstance(result, RetryPrompt):
            return candidates.index(result)
        print(get_string('uplink_retry', reason=result.reason))


def run_command(command: str, orchestrator: Orchestrator):
    if command == 'show':
        print(orchestrator.show())
    elif command == 'stop':
        for adapter, error in orchestrator.stop():
            print(get_string('stop_sharing_failed', name=adapter.name, message=error), file=sys.stderr)
        print(get_string('stop_success'))
    else:
        result = orchestrator.start(prompt_credentials, prompt_uplink)
        print(get_string('start_success', ssid=result.config.ssid,
                         uplink=result.roles.uplink.name, hotspot=result.roles.hotspot.name))
        print(get_string('start_stop_hint', app_name=APP_NAME.lower()))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    log_file_path = logger_setup.setup_logging()
    logger.info("-----------------------------------------------------")
    logger.info("%s %s starting: command=%s", APP_NAME, APP_VERSION, args.command)

    initialize_language()
    if args.lang:
        set_language(args.lang)
        print(get_string('language_saved'))

    print_banner()

    if sys.platform != "win32":
        logger.critical("Unsupported OS: %s", sys.platform)
        print(get_string('error_prefix', message=get_string('unsupported_os_message')), file=sys.stderr)
        return 1

    try:
        orchestrator = Orchestrator(Environment.from_system())
        run_command(args.command, orchestrator)
    except PrivilegeError as e:
        logger.error("Aborted: %s", e)
        print(get_string('error_prefix', message=e), file=sys.stderr)
        print(get_string('admin_required_message'), file=sys.stderr)
        return 1
    except HotspotError as e:
        logger.error("Aborted: %s", e, exc_info=True)
        print(get_string('error_prefix', message=e), file=sys.stderr)
        if log_file_path:
            print(get_string('log_file_hint', log_file_path=log_file_path), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print(get_string('cancelled'), file=sys.stderr)
        return 130
    except Exception:
        logger.critical("An unhandled exception occurred.", exc_info=True)
        print(get_string('error_prefix', message=get_string('fatal_error_message')), file=sys.stderr)
        if log_file_path:
            print(get_string('log_file_hint', log_file_path=log_file_path), file=sys.stderr)
        return 1
    finally:
        logger.info("%s finished.", APP_NAME)

    return 0


if __name__ == "__main__":
    sys.exit(main())
