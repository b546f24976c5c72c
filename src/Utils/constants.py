"""
constants.py
Identifiers, file names and mod-type ids shared by the ASTRONEER extension.
"""

GAME_ID = "astroneer"
GAME_NAME = "ASTRONEER"
STEAMAPP_ID = "361420"
XBOX_ID = "9NBLGGH43KZB"
XBOX_APP_EXEC_NAME = "AppSystemEraSoftworks29415440E1269Shipping"

DEFAULT_EXECUTABLE = "Astro.exe"
XBOX_EXECUTABLE = "gamelaunchhelper.exe"

# Store variants as reported by discovery
STORE_STEAM = "steam"
STORE_XBOX = "xbox"
DEFAULT_STORE = STORE_STEAM

# Suffix the host appends to a mod folder while it is being installed
INSTALLING_SUFFIX = ".installing"

LUA_EXTENSIONS = [".lua"]
PAK_EXTENSIONS = [".pak"]

UE4SS_ENABLED_FILE = "enabled.txt"
UE4SS_SETTINGS_FILE = "UE4SS-settings.ini"
UE4SS_MODS_TXT = "mods.txt"

AUTOINTEGRATOR_NAME = "AutoIntegrator"
AUTOINTEGRATOR_MARKER = "manifest.json"

# Loader-internal marker/info files. Never routed to the .pak mod type and
# never reported as deployment conflicts.
IGNORE_CONFLICTS = [UE4SS_ENABLED_FILE, "ue4sslogicmod.info", ".ue4sslogicmod", ".logicmod"]
IGNORE_DEPLOY = ["mods.json", UE4SS_ENABLED_FILE]

TOP_LEVEL_DIRECTORIES = ["Engine", "Astro"]

MOD_TYPE_PAK = "astroneer-pak-modtype"
MOD_TYPE_LUA = "astroneer-lua-modtype"
MOD_TYPE_UE4SS = ""            # default mod type: deploys relative to the game root
MOD_TYPE_AUTOINTEGRATOR = ""

NOTIF_ID_REQUIREMENTS = "astroneer-requirements-download-notification"
