from pixit.main import main

main(prog_name="pixit")
