from spring_visualizer.main import main

raise SystemExit(main())
