from .HjsonCli import main

raise SystemExit(main())
