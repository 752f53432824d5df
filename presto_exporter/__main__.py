from presto_exporter.main import main

main()
