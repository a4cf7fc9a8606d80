"""
Browser interface served at /.

One page: drop a file, watch the upload progress, show the QR code and the
link, then poll /status until the file has been picked up and destroyed.
"""


def get_html_interface():
    """Generate HTML interface"""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>QuickDrop</title>
    <style>
        {_get_css()}
    </style>
</head>
<body>
    {_get_html_body()}
    <script>
        {_get_javascript()}
    </script>
</body>
</html>"""


def _get_css():
    return """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #0a0a0a;
            color: #e5e5e5;
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
        }
        .card {
            width: 420px;
            padding: 32px;
            border-radius: 16px;
            background: #141414;
            border: 1px solid #2a2a2a;
            text-align: center;
        }
        h1 { font-size: 1.6rem; margin-bottom: 8px; }
        .subtitle { color: #8a8a8a; margin-bottom: 24px; font-size: 0.9rem; }
        #dropzone {
            display: flex;
            flex-direction: column;
            align-items: center;
            justify-content: center;
            height: 200px;
            border: 2px dashed #6D28D9;
            border-radius: 12px;
            cursor: pointer;
            transition: background 0.2s ease;
        }
        #dropzone.dragover { background: rgba(109, 40, 217, 0.15); }
        #progress-container, #result-container, #destructed-container { display: none; }
        #result-container { flex-direction: column; align-items: center; gap: 16px; }
        .progress-bar {
            width: 100%;
            height: 10px;
            background: #2a2a2a;
            border-radius: 5px;
            overflow: hidden;
        }
        #progress-bar-fill { width: 0%; height: 100%; background: #6D28D9; transition: width 0.1s; }
        #qr-image { width: 256px; height: 256px; background: #fff; border-radius: 8px; }
        #url-text { word-break: break-all; font-family: monospace; font-size: 0.85rem; }
        .hint { color: #8a8a8a; font-size: 0.85rem; }
        button {
            margin-top: 16px;
            padding: 10px 20px;
            border: none;
            border-radius: 8px;
            background: #6D28D9;
            color: #fff;
            cursor: pointer;
        }
        """


def _get_html_body():
    return """
    <div class="card">
        <h1>QuickDrop</h1>
        <p class="subtitle">Single-use file relay. The file self-destructs once downloaded.</p>
        <div id="dropzone">
            <p>Drop a file here or click to choose</p>
            <input type="file" id="file-input" hidden>
        </div>
        <div id="progress-container">
            <p class="hint">Uploading...</p>
            <div class="progress-bar"><div id="progress-bar-fill"></div></div>
        </div>
        <div id="result-container">
            <img id="qr-image" alt="QR code">
            <p id="url-text"></p>
            <p class="hint">Waiting for the recipient. This link works exactly once.</p>
        </div>
        <div id="destructed-container">
            <p>File downloaded and destroyed.</p>
            <button id="reset-btn">Send another file</button>
        </div>
    </div>
    """


def _get_javascript():
    return """
        const dropzone = document.getElementById('dropzone');
        const fileInput = document.getElementById('file-input');
        const progressContainer = document.getElementById('progress-container');
        const progressBarFill = document.getElementById('progress-bar-fill');
        const resultContainer = document.getElementById('result-container');
        const qrImage = document.getElementById('qr-image');
        const urlText = document.getElementById('url-text');
        const destructedContainer = document.getElementById('destructed-container');
        const resetBtn = document.getElementById('reset-btn');

        let pollInterval;

        ['dragenter', 'dragover'].forEach(eventName => {
            dropzone.addEventListener(eventName, (e) => {
                e.preventDefault();
                e.stopPropagation();
                dropzone.classList.add('dragover');
            }, false);
        });

        ['dragleave', 'drop'].forEach(eventName => {
            dropzone.addEventListener(eventName, (e) => {
                e.preventDefault();
                e.stopPropagation();
                dropzone.classList.remove('dragover');
            }, false);
        });

        dropzone.addEventListener('drop', (e) => handleFiles(e.dataTransfer.files), false);
        dropzone.addEventListener('click', () => fileInput.click());
        fileInput.addEventListener('change', (e) => handleFiles(e.target.files));

        function handleFiles(files) {
            if (files.length > 0) {
                uploadFile(files[0]);
            }
        }

        function uploadFile(file) {
            dropzone.style.display = 'none';
            progressContainer.style.display = 'block';

            const formData = new FormData();
            formData.append('file', file);

            const xhr = new XMLHttpRequest();
            xhr.open('POST', '/upload', true);

            xhr.upload.onprogress = function(e) {
                if (e.lengthComputable) {
                    progressBarFill.style.width = ((e.loaded / e.total) * 100) + '%';
                }
            };

            xhr.onload = function() {
                if (xhr.status === 200) {
                    showResult(JSON.parse(xhr.responseText));
                } else {
                    let message = 'Upload failed!';
                    try {
                        message += ' ' + JSON.parse(xhr.responseText).error;
                    } catch (err) {}
                    alert(message);
                    resetUI();
                }
            };

            xhr.onerror = function() {
                alert('Upload failed!');
                resetUI();
            };

            xhr.send(formData);
        }

        function showResult(data) {
            progressContainer.style.display = 'none';
            resultContainer.style.display = 'flex';
            urlText.innerText = data.url;
            qrImage.src = data.qr_url;
            startPolling(data.token);
        }

        function startPolling(token) {
            if (pollInterval) clearInterval(pollInterval);

            pollInterval = setInterval(() => {
                fetch('/status/' + token)
                    .then(res => {
                        if (res.status === 404) {
                            showDestructed();
                        }
                    })
                    .catch(err => console.error('Polling error:', err));
            }, 1000);
        }

        function showDestructed() {
            clearInterval(pollInterval);
            resultContainer.style.display = 'none';
            destructedContainer.style.display = 'block';
        }

        function resetUI() {
            clearInterval(pollInterval);
            destructedContainer.style.display = 'none';
            resultContainer.style.display = 'none';
            progressContainer.style.display = 'none';
            dropzone.style.display = 'flex';
            progressBarFill.style.width = '0%';
            fileInput.value = '';
        }

        resetBtn.addEventListener('click', resetUI);
        """
