from luastyle.cli import main

raise SystemExit(main())
