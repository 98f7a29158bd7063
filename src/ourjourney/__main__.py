from ourjourney.cli.main import ourjourney

ourjourney()
