from smokecloud.cli import main

raise SystemExit(main())
