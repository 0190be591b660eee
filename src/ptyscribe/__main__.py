from ptyscribe.cli import main

raise SystemExit(main())
