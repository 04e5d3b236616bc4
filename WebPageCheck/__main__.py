from WebPageCheck.cli import main

raise SystemExit(main())
