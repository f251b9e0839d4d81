from remtool.cli import main

raise SystemExit(main())
