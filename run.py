from app import create_app
from tabulate import tabulate

app = create_app()

def print_routes():
    table = []
    for rule in app.url_map.iter_rules():
        methods = ",".join(sorted(rule.methods - {'HEAD', 'OPTIONS'}))
        table.append([rule.endpoint, rule.rule, methods])
    app.logger.info("\n" + tabulate(sorted(table, key=lambda row: row[1]), headers=["Endpoint", "URL", "Methods"]))

if __name__ == '__main__':
    print_routes()
    app.run(debug=True, port=5000)
