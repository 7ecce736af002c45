"""
HTML for the rewards lookup page.

The page is a single form: a pool <select> (configured pools plus
"All Pools"), an epoch input, and a results table filled in by the
client-side script from the JSON API.
"""

from html import escape
from string import Template
from typing import Sequence

from src.data.schemas import PoolEntry

ALL_POOLS_OPTION = "all"

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
    <title>Stryke Contract Rewards</title>
    <style>
        body {
            font-family: Arial;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
            background: #1c1c1c;
            color: #fff;
        }
        select, input, button {
            padding: 8px;
            margin: 5px 0;
            width: 100%;
            background: #333;
            color: #fff;
            border: 1px solid #555;
        }
        button {
            background: #f3ff69;
            color: #000;
            cursor: pointer;
        }
        table {
            width: 100%;
            border-collapse: collapse;
            margin-top: 20px;
        }
        th, td {
            border: 1px solid #444;
            padding: 8px;
            text-align: left;
        }
        .hidden { display: none; }
    </style>
</head>
<body>
    <h1>Stryke Rewards Lookup</h1>
    <div>
        <select id="poolSelect">
            <option value="">Select a pool...</option>
$options
            <option value="$all_value">All Pools</option>
        </select>
        <input type="number" id="epochInput" placeholder="Enter epoch number" min="0">
        <button onclick="lookupRewards()">Lookup Rewards</button>
    </div>
    <div id="error" style="color: red; margin-top: 10px;"></div>
    <div id="loading" class="hidden">Loading...</div>
    <div id="results" class="hidden">
        <h2>Results</h2>
        <table>
            <thead>
                <tr>
                    <th>Pool</th>
                    <th>Rewards</th>
                </tr>
            </thead>
            <tbody id="resultsBody"></tbody>
        </table>
    </div>

    <script>
        async function lookupRewards() {
            const poolId = document.getElementById('poolSelect').value;
            const epoch = document.getElementById('epochInput').value;

            if (!poolId) {
                showError('Please select a pool');
                return;
            }

            if (!epoch && epoch !== '0') {
                showError('Please enter an epoch number');
                return;
            }

            document.getElementById('error').textContent = '';
            document.getElementById('loading').classList.remove('hidden');
            document.getElementById('results').classList.add('hidden');

            try {
                const url = poolId === '$all_value' ? '/api/all-pools' : '/api/rewards';
                const body = poolId === '$all_value' ? { epoch } : { poolId, epoch };
                const response = await fetch(url, {
                    method: 'POST',
                    headers: { 'Content-Type': 'application/json' },
                    body: JSON.stringify(body)
                });

                const data = await response.json();

                if (data.success) {
                    displayResults(data.results);
                } else {
                    showError(data.error || 'Failed to fetch rewards');
                }
            } catch (error) {
                showError('Error: ' + error.message);
            } finally {
                document.getElementById('loading').classList.add('hidden');
            }
        }

        function displayResults(results) {
            const tbody = document.getElementById('resultsBody');
            tbody.innerHTML = '';

            results.forEach(result => {
                const row = document.createElement('tr');

                const poolCell = document.createElement('td');
                poolCell.textContent = result.poolName;
                row.appendChild(poolCell);

                const rewardCell = document.createElement('td');
                rewardCell.textContent = result.error ? 'Error: ' + result.error : result.formattedValue;
                row.appendChild(rewardCell);

                tbody.appendChild(row);
            });

            document.getElementById('results').classList.remove('hidden');
        }

        function showError(message) {
            document.getElementById('error').textContent = message;
        }
    </script>
</body>
</html>
""")


def render_index_page(pools: Sequence[PoolEntry]) -> str:
    """Render the lookup page with one <option> per configured pool."""
    options = "\n".join(
        f'            <option value="{escape(entry.id)}">{escape(entry.name)}</option>'
        for entry in pools
    )
    return _PAGE.substitute(options=options, all_value=ALL_POOLS_OPTION)
