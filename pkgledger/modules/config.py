import configparser
import os

DEFAULT_LOCATIONS = [
    "/etc/pkgledger/pkgledger.conf",
    os.path.expanduser("~/.config/pkgledger/pkgledger.conf"),
]

DEFAULT_LEDGER_FILE = os.path.expanduser("~/.local/share/pkgledger/ledger.json")


def default_locations():
    """Locais de busca, com $PKGLEDGER_CONF na frente quando definido."""
    env_path = os.environ.get("PKGLEDGER_CONF")
    if env_path:
        return [env_path] + DEFAULT_LOCATIONS
    return list(DEFAULT_LOCATIONS)


class LedgerConfig:
    def __init__(self, locations=None, required=False):
        self.locations = locations or default_locations()
        self.config = configparser.ConfigParser()
        self.loaded_from = None
        self.reload(required=required)

    def reload(self, required=False):
        """(Re)carrega a configuração do primeiro arquivo disponível."""
        self.config = configparser.ConfigParser()
        self.loaded_from = None
        for path in self.locations:
            if os.path.isfile(path):
                self.config.read(path)
                self.loaded_from = path
                return
        if required:
            raise FileNotFoundError(f"No configuration file found in: {self.locations}")

    def get(self, section, option, fallback=None):
        try:
            return self.config.get(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def getboolean(self, section, option, fallback=False):
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getint(self, section, option, fallback=0):
        try:
            return self.config.getint(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def ledger_file(self):
        """Caminho do arquivo do ledger ([ledger] file), com ~ expandido."""
        return os.path.expanduser(self.get("ledger", "file", fallback=DEFAULT_LEDGER_FILE))


# Instância global padrão para uso em outros módulos
config = LedgerConfig()
