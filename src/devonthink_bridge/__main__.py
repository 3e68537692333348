"""Allow `python -m devonthink_bridge`."""

from devonthink_bridge.cli.main import main

main()
