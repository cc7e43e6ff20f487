from prrs.cli import main

raise SystemExit(main())
