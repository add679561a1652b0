"""Desktop and phone pages driving the hand-off flow."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def desktop_page() -> HTMLResponse:
    """Payment form that starts a session and polls for the card."""
    return HTMLResponse(_DESKTOP_HTML)


@router.get("/scanner", response_class=HTMLResponse)
@router.get("/scanner.html", response_class=HTMLResponse)
async def scanner_page() -> HTMLResponse:
    """Phone capture page opened from the QR code."""
    return HTMLResponse(_SCANNER_HTML)


_DESKTOP_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Card Details</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; }
      .error { color: #b00020; }
      .hidden { display: none; }
    </style>
  </head>
  <body>
    <h1>Card Details</h1>
    <div class="row"><button id="scanButton">Scan with phone</button></div>
    <div id="qrPanel" class="row hidden">
      <img id="qrImage" alt="Scan this code with your phone" width="260" />
      <p><a id="mobileLink" href="#">Open on this device</a></p>
    </div>
    <p id="status"></p>
    <div class="row"><label>Card number</label><br /><input id="cardNumber" /></div>
    <div class="row"><label>Cardholder name</label><br /><input id="cardholderName" /></div>
    <div class="row"><label>Expiry (MM/YY)</label><br /><input id="expiryDate" /></div>
    <div class="row"><label>Network</label><br /><input id="cardType" readonly /></div>
    <script>
      let pollHandle = null;

      function setStatus(text, isError) {
        const status = document.getElementById('status');
        status.textContent = text;
        status.className = isError ? 'error' : '';
      }

      function formatCardNumber(value) {
        return (value || '').replace(/\\D/g, '').slice(0, 16).replace(/(.{4})/g, '$1 ').trim();
      }

      function applyCardData(data) {
        document.getElementById('cardNumber').value =
          formatCardNumber(data.cardNumber) || data.maskedCardNumber || '';
        document.getElementById('cardholderName').value = data.cardholderName || '';
        document.getElementById('expiryDate').value = data.expiryDate || '';
        document.getElementById('cardType').value = data.cardType || 'UNKNOWN';
      }

      function stopPolling() {
        if (pollHandle) {
          clearInterval(pollHandle);
          pollHandle = null;
        }
      }

      async function pollOnce(sessionId) {
        const res = await fetch('/api/get-data?sessionId=' + encodeURIComponent(sessionId), {
          cache: 'no-store'
        });
        if (res.status === 404 || res.status === 410) {
          setStatus('Session expired. Please scan again.', true);
          stopPolling();
          return;
        }
        if (!res.ok) return;
        const body = await res.json();
        if (body.status === 'ready' && body.data) {
          applyCardData(body.data);
          setStatus('Card details autofilled successfully.', false);
          document.getElementById('qrPanel').classList.add('hidden');
          stopPolling();
        } else {
          setStatus('Waiting for mobile scan...', false);
        }
      }

      function startPolling(sessionId) {
        stopPolling();
        pollOnce(sessionId);
        pollHandle = setInterval(function () { pollOnce(sessionId); }, 1500);
      }

      document.getElementById('scanButton').addEventListener('click', async function () {
        setStatus('Creating session...', false);
        const res = await fetch('/api/session', { method: 'POST' });
        const body = await res.json();
        if (!body.ok) {
          setStatus(body.error || 'Could not start a session.', true);
          return;
        }
        document.getElementById('qrImage').src = body.qrCode;
        document.getElementById('mobileLink').href = body.mobileUrl;
        document.getElementById('qrPanel').classList.remove('hidden');
        startPolling(body.sessionId);
      });

      const params = new URLSearchParams(window.location.search);
      if (params.get('sessionId') && params.get('autopoll') === '1') {
        startPolling(params.get('sessionId'));
      }
    </script>
  </body>
</html>
"""

_SCANNER_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Scan Card</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 1.5rem; }
      button, input { font-size: 1.1rem; margin-bottom: 1rem; }
      video { width: 100%; max-width: 640px; background: #000; border-radius: 8px; }
      .error { color: #b00020; }
      .hidden { display: none; }
    </style>
  </head>
  <body>
    <h1>Scan your card</h1>
    <video id="video" autoplay playsinline muted></video>
    <canvas id="captureCanvas" class="hidden"></canvas>
    <div><button id="scanButton" disabled>Start scan</button></div>
    <input id="cardImage" class="hidden" type="file" accept="image/*" capture="environment" />
    <p id="status">Hold the card flat, in good light, inside the frame.</p>
    <pre id="result"></pre>
    <script>
      const params = new URLSearchParams(window.location.search);
      const sessionId = params.get('sessionId');
      const SCAN_INTERVAL_MS = 650;
      const CARD_ASPECT_RATIO = 1.58;
      const MAX_CAPTURE_WIDTH = 960;
      let stream = null;
      let scanHandle = null;
      let uploadInFlight = false;
      let completed = false;

      function safeReturnUrl() {
        const raw = params.get('returnTo');
        if (!raw) return '';
        try {
          const parsed = new URL(raw, window.location.origin);
          return parsed.origin === window.location.origin ? parsed.toString() : '';
        } catch (error) {
          return '';
        }
      }

      function setStatus(text, isError) {
        const status = document.getElementById('status');
        status.textContent = text;
        status.className = isError ? 'error' : '';
      }

      function showFileFallback(message) {
        setStatus(message, true);
        document.getElementById('scanButton').classList.add('hidden');
        document.getElementById('video').classList.add('hidden');
        document.getElementById('cardImage').classList.remove('hidden');
      }

      async function openCamera() {
        if (!sessionId) {
          setStatus('Missing session. Scan the QR code on your computer again.', true);
          return;
        }
        if (!window.isSecureContext || !navigator.mediaDevices ||
            !navigator.mediaDevices.getUserMedia) {
          showFileFallback('Live camera unavailable here. Take a photo instead.');
          return;
        }
        try {
          stream = await navigator.mediaDevices.getUserMedia({
            video: {
              facingMode: { ideal: 'environment' },
              width: { ideal: 1280 },
              height: { ideal: 720 }
            },
            audio: false
          });
          document.getElementById('video').srcObject = stream;
          document.getElementById('scanButton').disabled = false;
          setStatus('Camera ready. Tap Start scan.', false);
        } catch (error) {
          showFileFallback('Camera permission denied. Take a photo instead.');
        }
      }

      function captureFrame() {
        return new Promise(function (resolve) {
          const video = document.getElementById('video');
          const canvas = document.getElementById('captureCanvas');
          const frameWidth = video.videoWidth;
          const frameHeight = video.videoHeight;
          if (!frameWidth || !frameHeight) {
            resolve(null);
            return;
          }
          const sourceHeight = Math.min(
            Math.floor((frameWidth * 0.86) / CARD_ASPECT_RATIO), frameHeight
          );
          const sourceWidth = Math.floor(sourceHeight * CARD_ASPECT_RATIO);
          const sourceX = Math.max(0, Math.floor((frameWidth - sourceWidth) / 2));
          const sourceY = Math.max(0, Math.floor((frameHeight - sourceHeight) / 2));
          canvas.width = Math.min(MAX_CAPTURE_WIDTH, sourceWidth);
          canvas.height = Math.floor(canvas.width / CARD_ASPECT_RATIO);
          canvas.getContext('2d').drawImage(
            video, sourceX, sourceY, sourceWidth, sourceHeight,
            0, 0, canvas.width, canvas.height
          );
          canvas.toBlob(resolve, 'image/jpeg', 0.78);
        });
      }

      async function upload(blob, filename) {
        const formData = new FormData();
        formData.append('sessionId', sessionId);
        formData.append('cardImage', blob, filename);
        const res = await fetch('/api/scan', { method: 'POST', body: formData });
        return { status: res.status, body: await res.json() };
      }

      function stopScanning() {
        if (scanHandle) {
          clearInterval(scanHandle);
          scanHandle = null;
        }
        document.getElementById('scanButton').textContent = 'Start scan';
      }

      function stopCamera() {
        if (stream) {
          stream.getTracks().forEach(function (track) { track.stop(); });
          stream = null;
        }
      }

      function finish(body) {
        completed = true;
        stopScanning();
        stopCamera();
        document.getElementById('result').textContent = JSON.stringify(body.data, null, 2);
        setStatus(body.message, false);
        const returnTo = safeReturnUrl();
        if (returnTo) {
          setTimeout(function () { window.location.replace(returnTo); }, 1800);
        }
      }

      function handleFailure(result) {
        if (result.status === 422) {
          setStatus('Reading card... adjust angle and lighting.', false);
        } else if (result.status === 404 || result.status === 410) {
          setStatus('Session expired. Scan the QR code on your computer again.', true);
          stopScanning();
        } else {
          setStatus(result.body.error || 'Scan in progress... keep card inside frame.', false);
        }
      }

      async function scanOnce() {
        if (!scanHandle || uploadInFlight || completed) return;
        uploadInFlight = true;
        try {
          const blob = await captureFrame();
          if (!blob) {
            setStatus('Could not read camera frame. Keep card steady.', true);
            return;
          }
          const result = await upload(blob, 'card-scan.jpg');
          if (result.body.ok) {
            finish(result.body);
          } else {
            handleFailure(result);
          }
        } catch (error) {
          setStatus('Network error. Retrying...', true);
        } finally {
          uploadInFlight = false;
        }
      }

      document.getElementById('scanButton').addEventListener('click', function () {
        if (scanHandle) {
          stopScanning();
          setStatus('Scan paused.', false);
          return;
        }
        completed = false;
        document.getElementById('scanButton').textContent = 'Stop scan';
        setStatus('Scanning... hold the card inside the frame.', false);
        scanHandle = setInterval(scanOnce, SCAN_INTERVAL_MS);
        scanOnce();
      });

      document.getElementById('cardImage').addEventListener('change', async function (event) {
        const file = event.target.files[0];
        if (!file || !sessionId) return;
        setStatus('Reading card...', false);
        const result = await upload(file, file.name || 'card-scan.jpg');
        if (result.body.ok) {
          finish(result.body);
        } else {
          handleFailure(result);
        }
      });

      window.addEventListener('beforeunload', function () {
        stopScanning();
        stopCamera();
      });

      openCamera();
    </script>
  </body>
</html>
"""
