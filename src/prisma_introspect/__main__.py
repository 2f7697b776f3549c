from prisma_introspect.cli import main

main()
