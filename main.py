"""
stryke_rewards_lookup – Main entry point.

Starts the interactive contract function caller. See
actions/lookup_rewards.py for options (--epoch, --output).
"""

from actions.lookup_rewards import main


if __name__ == "__main__":
    main()
