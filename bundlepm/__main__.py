from bundlepm.main import main

raise SystemExit(main())
