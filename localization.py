import locale

# --- Language Configuration ---
LANG_CODE_KEY = 'lang_code' # A special key to get the current language code itself
SUPPORTED_LANGUAGES = ['en', 'fi']
CURRENT_LANGUAGE = 'en'  # Default, will be updated by initialize_language
DEFAULT_LANGUAGE = 'en'

# --- String Definitions ---
STRINGS = {
    'en': {
        LANG_CODE_KEY: 'en',
        # Banner
        'banner': "{app_name} {version} - share your Internet connection over Wi-Fi",
        'banner_underline': "=" * 60,

        # Startup Errors
        'unsupported_os_message': "This application is designed for Windows only.",
        'admin_required_message': "Run this command from an elevated (Administrator) prompt.",
        'language_saved': "Using English for this run.",

        # Generic Errors
        'error_prefix': "ERROR: {message}",
        'fatal_error_message': "An unexpected error occurred.",
        'cancelled': "Cancelled by user.",

        # Log file hint
        'log_file_hint': "For more details, see the log file:\n{log_file_path}",

        # Start
        'prompt_ssid': "Network name (SSID): ",
        'prompt_key': "Network key (at least 8 characters): ",
        'prompt_cancelled': "Credential prompt cancelled.",
        'uplink_list_title': "Connections with Internet access:",
        'uplink_list_item': "  [{index}] {name} ({device_name})",
        'prompt_uplink': "Select the connection to share [0-{last}]: ",
        'uplink_retry': "Invalid choice: {reason}",
        'start_success': "Hotspot '{ssid}' is running. '{uplink}' is shared through '{hotspot}'.",
        'start_stop_hint': "Run '{app_name} stop' to turn the hotspot off.",

        # Stop
        'stop_success': "Hotspot stopped and connection sharing disabled.",
        'stop_sharing_failed': "Warning: sharing could not be disabled on '{name}': {message}",
    },
    'fi': {
        LANG_CODE_KEY: 'fi',
        # Banner
        'banner': "{app_name} {version} - jaa Internet-yhteytesi Wi-Fin kautta",
        'banner_underline': "=" * 60,

        # Startup Errors
        'unsupported_os_message': "Tämä sovellus on tarkoitettu vain Windowsille.",
        'admin_required_message': "Suorita komento järjestelmänvalvojan oikeuksin avatussa kehotteessa.",
        'language_saved': "Käytetään suomea tällä kertaa.",

        # Generic Errors
        'error_prefix': "VIRHE: {message}",
        'fatal_error_message': "Tapahtui odottamaton virhe.",
        'cancelled': "Käyttäjä keskeytti toiminnon.",

        # Log file hint
        'log_file_hint': "Lisätietoja lokitiedostossa:\n{log_file_path}",

        # Start
        'prompt_ssid': "Verkon nimi (SSID): ",
        'prompt_key': "Verkon avain (vähintään 8 merkkiä): ",
        'prompt_cancelled': "Tunnusten kysely keskeytettiin.",
        'uplink_list_title': "Yhteydet, joilla on Internet-yhteys:",
        'uplink_list_item': "  [{index}] {name} ({device_name})",
        'prompt_uplink': "Valitse jaettava yhteys [0-{last}]: ",
        'uplink_retry': "Virheellinen valinta: {reason}",
        'start_success': "Hotspot '{ssid}' on käynnissä. '{uplink}' jaetaan yhteyden '{hotspot}' kautta.",
        'start_stop_hint': "Sammuta hotspot komennolla '{app_name} stop'.",

        # Stop
        'stop_success': "Hotspot pysäytetty ja yhteyden jakaminen poistettu käytöstä.",
        'stop_sharing_failed': "Varoitus: jakamista ei voitu poistaa yhteydeltä '{name}': {message}",
    }
}

def _get_system_language() -> str:
    """Detects the OS language as a fallback."""
    try:
        # E.g., 'en_US', 'fi_FI' or 'Finnish_Finland'
        lang_code, _ = locale.getlocale()
        if lang_code:
            primary_lang = lang_code.split('_')[0].lower()
            if primary_lang == 'finnish':
                primary_lang = 'fi'
            if primary_lang in SUPPORTED_LANGUAGES:
                return primary_lang
    except ValueError:
        pass
    return DEFAULT_LANGUAGE

def set_language(lang_code: str):
    """Switches the language for the current run. Nothing is saved."""
    global CURRENT_LANGUAGE
    if lang_code in SUPPORTED_LANGUAGES:
        CURRENT_LANGUAGE = lang_code

def initialize_language():
    """Picks the language from the system locale, falling back to the default."""
    global CURRENT_LANGUAGE
    CURRENT_LANGUAGE = _get_system_language()

def get_string(key: str, **kwargs) -> str:
    """
    Retrieves a localized string by its key and formats it with provided arguments.
    If a default is provided, it's used when the key is not found.
    """
    return STRINGS[CURRENT_LANGUAGE].get(key, kwargs.get('default', f"<{key}>")).format(**kwargs)
