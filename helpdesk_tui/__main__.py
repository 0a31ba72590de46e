import sys

from helpdesk_tui.main import main

sys.exit(main())
