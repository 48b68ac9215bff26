from importlib.metadata import PackageNotFoundError, version

try:
    VERSION = version("facecards")
except PackageNotFoundError:
    VERSION = "0+unknown"
