"""Run the kn-local command line tool."""

from kn_local.tool.kn_local import main

if __name__ == "__main__":
    main()
